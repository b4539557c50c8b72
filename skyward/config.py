"""Game configuration constants for Skyward."""

# Display
WINDOW_WIDTH = 400
WINDOW_HEIGHT = 600
FPS = 60

# Ball
BALL_RADIUS = 20
BALL_MAX_SPEED = 4.0  # horizontal cap before boosts
GRAVITY = 0.5  # px/tick^2
MAX_VERTICAL_SPEED = 20.0
HP_MAX = 3.0
HP_MIN = 0.0

# Horizontal control
ACCELERATION = 0.1
DECELERATION_FACTOR = 0.1
BOOSTED_DECELERATION_FACTOR = 0.15
VELOCITY_SMOOTH_FACTOR = 0.9
STOP_THRESHOLD = 0.05
WALL_BOUNCE = 0.25

# Jumping
JUMP_FORCE_BASE = -7.0  # reference force for platform-driven bounces
JUMP_IMPULSE = -11.0  # player jump, clears MAX_REACHABLE_GAP
JUMP_GRAVITY_BONUS = 0.5  # extra jump power at a gravity platform's center
JUMP_POWER_MULTIPLIER = 1.15
JUMP_AIR_CONTROL = 0.9

# Jump power-up (milliseconds)
JUMP_POWER_COOLDOWN_MS = 5000.0
JUMP_POWER_DURATION_MS = 7000.0

# Passive skills (milliseconds)
SPEED_BOOST_DURATION_MS = 6250.0
SPEED_BOOST_COOLDOWN_MS = 2900.0
SPEED_BOOST_MULTIPLIER = 1.5
GRAVITY_RESISTANCE_DURATION_MS = 5500.0
GRAVITY_RESISTANCE_COOLDOWN_MS = 7650.0
GRAVITY_RESISTANCE_FACTOR = 0.85

# HP regeneration
HP_REGEN_INTERVAL_MS = 5000.0
HP_REGEN_AMOUNT = 0.2

# Hazards
SPIKES_DAMAGE = 0.5
GRASSSPIKES_DAMAGE = 0.3
INVULNERABLE_TICKS = 60
POISON_TICKS = 120
POISON_INTERVAL = 30

# Gravity wells
GRAVITY_WELL_RADIUS = 100.0  # reach of the gravity modifier
ANTI_GRAVITY_RADIUS = 30.0
GRAVITY_FIELD_RADIUS = 60.0  # reach of the attraction field
GRAVITY_FIELD_INNER_RADIUS = 15.0
GRAVITY_FIELD_CAPTURE_RADIUS = 6.0
GRAVITY_FIELD_STRENGTH = 0.12
GRAVITY_FIELD_MAX_SPEED = 5.5
GRAVITY_FIELD_BELOW_CUTOFF = 50.0
GRAVITY_CAPTURE_EASING = 0.12
GRAVITY_CAPTURE_DAMPING = 0.6

# Windblast
FLOAT_ACTIVATION_RADIUS = 50.0
FLOAT_UPWARD_FORCE = -0.1
WIND_DURATION_TICKS = 240
WIND_KICK = -4.0
WIND_FIELD_FRACTION = 0.75
WIND_HORIZONTAL_FORCE = 0.35
WIND_MAX_PUSH_SPEED = 4.5
WIND_LIFT = 0.55
WIND_CEILING_FRACTION = 0.2
WIND_TURBULENCE = 0.15
WIND_DRAG = 0.985
WIND_MAX_UPWARD_SPEED = -7.5
WIND_MAX_HORIZONTAL_SPEED = 7.0

# Platform behaviours
LANDING_TOLERANCE = 1.5
BRAKE_TICKS = 100
BRAKE_RECOVERY = 0.1
ICE_KICK_SPEED = 1.8
ICE_ACCELERATION = 1.03
ICE_MAX_SPEED = 4.5
ICE_SLIP_TICKS = 18
SLIP_MIN_FACTOR = 0.88
SLIP_MAX_FACTOR = 0.98
SOAP_SPEEDUP = 1.1
BOUNCY_FORCE_FACTOR = 1.4
BOUNCY_POWER_BONUS = 0.4
BOUNCE_EFFECT_TICKS = 10
MOVING_PLATFORM_SPEED = 1.5
FRAGILE_WARNING_TICKS = 30
FRAGILE_CONTACT_DECAY = 15
FRAGILE_BREAK_TICKS = 100
FRAGILE_FADE_PER_TICK = 0.02

# Coins and scoring
COIN_COMBO_TICKS = 60
HEIGHT_UNITS_PER_POINT = 10.0

# Camera
CAMERA_LERP = 0.1

# Level generation
GROUND_HEIGHT = 40
START_PLATFORM_WIDTH = 100
START_PLATFORM_HEIGHT = 12
START_PLATFORM_LIFT = 60
PLATFORM_HEIGHT = 10
INITIAL_PLATFORM_COUNT = 20
INITIAL_MIN_GAP = 100
INITIAL_MAX_GAP = 140
INITIAL_TOP_MARGIN = 50
SPIRAL_BASE_RADIUS = 120
SPIRAL_RADIUS_STEP = 5
PLACEMENT_PADDING = 40
TARGET_PLATFORM_COUNT = 18
OFFSCREEN_MARGIN = 50
SPAWN_BASE_GAP = 90.0
SPAWN_MAX_GAP = 130.0
# Plain jump apex: 121 in closed form, 115.5 with per-tick integration.
JUMP_APEX = JUMP_IMPULSE**2 / (2 * GRAVITY)
REACH_MARGIN = 15.0
MAX_REACHABLE_GAP = JUMP_APEX - REACH_MARGIN
# Horizontal distance a held-direction jump covers past the frontier's edges
MAX_REACHABLE_OFFSET = 60.0
GRASS_SPACING = 300.0
RECENT_WINDOW = 5
REPEAT_WINDOW = 3
COOLDOWN_DECAY = 0.5
SUPPRESSED_WEIGHT = 0.1
DEFAULT_SEED = None

# Palette
COL_BG = (0, 0, 0)
COL_HUD = (255, 255, 255)
COL_BALL = (193, 68, 14)
COL_BALL_RIM = (110, 38, 14)
COL_COIN = (255, 200, 0)
COL_COIN_GOLD = (255, 215, 0)
COL_COIN_STAR = (255, 246, 204)
PLATFORM_COLORS = {
    "static": (164, 117, 81),
    "bouncy": (46, 204, 113),
    "fragile": (217, 100, 89),
    "moving": (108, 160, 220),
    "slip": (178, 186, 187),
    "ice": (180, 220, 255),
    "gravity": (244, 208, 63),
    "windblast": (176, 224, 230),
    "spikes": (30, 30, 30),
    "grassspikes": (34, 139, 34),
}
