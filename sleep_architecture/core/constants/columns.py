"""
Column names for tabular hypnogram results.

Used by the DataFrame views on HypnogramResult and TransitionMatrix so
downstream exporters can address columns without string literals.
"""

from enum import StrEnum


class EpochColumn(StrEnum):
    """Per-epoch table columns."""

    EPOCH = "epoch"
    CLOCK_TIME = "clock_time"
    MINUTES = "minutes"
    STAGE = "stage"
    STAGE_NUMERIC = "stage_n"
    PERSISTENT_SLEEP = "persistent_sleep"
    SLEEP_STATE = "sleep_state"
    PERIOD = "period"
    SLEEP_CODE = "sleep_code"
    CYCLE = "cycle"
    CYCLE_POS_REL = "cycle_pos_rel"
    CYCLE_POS_ABS = "cycle_pos_abs"
    CYCLE_ENDING_WASO = "cycle_ending_waso"
    FINAL_WAKE = "final_wake"
    WASO = "waso"
    FLANKING_MIN = "flanking_min"
    FLANKING_ALL = "flanking_all"
    NEAREST_WAKE = "nearest_wake"
    TR_NR2R = "tr_nr2r"
    TOT_NR2R = "tot_nr2r"
    TR_NR2W = "tr_nr2w"
    TOT_NR2W = "tot_nr2w"
    TR_R2NR = "tr_r2nr"
    TOT_R2NR = "tot_r2nr"
    TR_R2W = "tr_r2w"
    TOT_R2W = "tot_r2w"
    TR_W2NR = "tr_w2nr"
    TOT_W2NR = "tot_w2nr"
    TR_W2R = "tr_w2r"
    TOT_W2R = "tot_w2r"
    DEPTH_TRAJECTORY = "n2_wgt"
    E_WAKE = "e_wake"
    E_WASO = "e_waso"
    E_SLEEP = "e_sleep"
    E_N1 = "e_n1"
    E_N2 = "e_n2"
    E_N3 = "e_n3"
    E_REM = "e_rem"
    PCT_E_SLEEP = "pct_e_sleep"
    PCT_E_N1 = "pct_e_n1"
    PCT_E_N2 = "pct_e_n2"
    PCT_E_N3 = "pct_e_n3"
    PCT_E_REM = "pct_e_rem"


class CycleColumn(StrEnum):
    """Per-cycle table columns."""

    CYCLE = "cycle"
    START_EPOCH = "start_epoch"
    END_EPOCH = "end_epoch"
    MINUTES = "minutes"
    NREM_MINUTES = "nrem_minutes"
    REM_MINUTES = "rem_minutes"
    OTHER_MINUTES = "other_minutes"
    EPOCHS = "epochs"


class TransitionColumn(StrEnum):
    """Transition table columns."""

    PRE = "pre"
    POST = "post"
    COUNT = "n"
    PROBABILITY = "p"
    P_POST_GIVEN_PRE = "p_post_cond_pre"
    P_PRE_GIVEN_POST = "p_pre_cond_post"
