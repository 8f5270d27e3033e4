DOMAIN = "novy_hood"

CONF_REMOTE          = "remote_entity_id"
CONF_DEVICE          = "device"            # learned-command device name on the remote
CONF_ADDRESS         = "address"           # optional RF address filter for inbound signals
CONF_ONOFF_ACTION    = "onoff_action"      # light / hood / device
CONF_RUN_OUT         = "run_out"           # bool

EVENT_SIGNAL         = "novy_hood_signal"  # inbound: {"unit": ..., "address": ...}
SERVICE_SEND_COMMAND = "send_command"

STORAGE_VERSION      = 1
SAVE_DELAY           = 1                   # seconds

# RF toggle channels
UNIT_ONOFF           = "onoff"
UNIT_LIGHT           = "light"
UNIT_INCREASE        = "increase"
UNIT_DECREASE        = "decrease"
UNIT_NONE            = "none"              # suppress transmission
SIGNAL_UNITS = (UNIT_ONOFF, UNIT_LIGHT, UNIT_INCREASE, UNIT_DECREASE)

MIN_SPEED = 0
MAX_SPEED = 4

# semantic commands
CMD_ON                   = "on"
CMD_OFF                  = "off"
CMD_OFF_RUN_OUT          = "off_run_out"
CMD_TOGGLE_ONOFF         = "toggle_onoff"
CMD_TOGGLE_ONOFF_RUN_OUT = "toggle_onoff_run_out"
CMD_LIGHT_ON             = "light_on"
CMD_LIGHT_OFF            = "light_off"
CMD_TOGGLE_LIGHT         = "toggle_light"
CMD_INCREASE             = "increase"
CMD_DECREASE             = "decrease"
SPEED_COMMANDS = tuple(f"speed_{n}" for n in range(MIN_SPEED, MAX_SPEED + 1))
COMMANDS = (
    CMD_ON,
    CMD_OFF,
    CMD_OFF_RUN_OUT,
    CMD_TOGGLE_ONOFF,
    CMD_TOGGLE_ONOFF_RUN_OUT,
    CMD_LIGHT_ON,
    CMD_LIGHT_OFF,
    CMD_TOGGLE_LIGHT,
    CMD_INCREASE,
    CMD_DECREASE,
    *SPEED_COMMANDS,
)

# what a bare on/off request means
ONOFF_ACTION_LIGHT   = "light"
ONOFF_ACTION_HOOD    = "hood"
ONOFF_ACTION_DEVICE  = "device"
ONOFF_ACTIONS = (ONOFF_ACTION_LIGHT, ONOFF_ACTION_HOOD, ONOFF_ACTION_DEVICE)

# timer purposes and their delays (seconds)
TIMER_RUN_OUT        = "run_out"
TIMER_AUTO_STOP      = "auto_stop"         # reserved
TIMER_POWER_REDUCE   = "power_reduce"      # reserved
TIMER_RESEND         = "resend"
TIMEOUTS = {
    TIMER_RUN_OUT: 10 * 60,
    TIMER_AUTO_STOP: 3 * 60 * 60,
    TIMER_POWER_REDUCE: 6 * 60,
    TIMER_RESEND: 0.05,
}

# persisted record
ATTR_SPEED           = "speed"
ATTR_SPEED_LEVEL     = "speed_level"
ATTR_LIGHT           = "light"
ATTR_OFF_RUN_OUT     = "off_run_out"
ATTR_RUN_OUT_ACTIVE  = "run_out_active"
ATTR_TARGET_SPEED    = "target_speed"
ATTR_SPEED_HISTORY   = "speed_history"
ATTR_LIGHT_HISTORY   = "light_history"

# default values
DEF_STATE = {
    ATTR_SPEED: 0,
    ATTR_SPEED_LEVEL: "speed_0",
    ATTR_LIGHT: False,
    ATTR_OFF_RUN_OUT: None,
    ATTR_RUN_OUT_ACTIVE: False,
    ATTR_TARGET_SPEED: None,
    ATTR_SPEED_HISTORY: None,
    ATTR_LIGHT_HISTORY: None,
}
DEF_OPTIONS = {
    CONF_ONOFF_ACTION: ONOFF_ACTION_DEVICE,
    CONF_RUN_OUT: False,
}
