"""
TipStake Constants

This module consolidates the protocol constants of the staking engine and the
environment-driven logger configuration. Constants are organized by category
for easy reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_ENABLED':                'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE STAKING PARAMETERS BELOW ARE PART OF THE ENGINE'S OBSERVABLE CONTRACT. CHANGING
# THEM CHANGES REWARD, COOLDOWN AND SLASHING OUTCOMES FOR EVERY EXISTING ACCOUNT. OVERRIDE THEM
# THROUGH config.toml ONLY FOR TESTING OR WHEN DEPLOYING A NEW ENGINE.

# ==================================================================================
# STAKING PARAMETERS
# ==================================================================================
MIN_STAKE = 10_000_000  # 1 token at 7 decimals
COOLDOWN_TICKS = 120_960  # ~7 days at 5 seconds per tick
REWARD_RATE_BPS = 500  # 5% annual
BPS_DENOMINATOR = 10_000
TICKS_PER_YEAR = 6_307_200  # 365 days at 5 seconds per tick
MAX_BOOST = 200  # percentage points
BOOST_STEP = 10  # percentage points per whole square root of the stake ratio
SLASH_RATE_BPS = 1_000  # 10% of principal


# ==================================================================================
# NUMERIC BOUNDS
# ==================================================================================
# Amounts, totals and intermediate products are signed 128-bit quantities
AMOUNT_BITS = 128
MAX_AMOUNT = 2 ** (AMOUNT_BITS - 1) - 1
MIN_AMOUNT = -(2 ** (AMOUNT_BITS - 1))

# Ticks are unsigned 32-bit ledger sequence numbers
MAX_TICK = 2 ** 32 - 1


# ==================================================================================
# ASSETS
# ==================================================================================
NATIVE_ASSET_ID = 'native'
DEFAULT_TOKEN_DECIMALS = 7
TOKEN_MAX_SUPPLY = MAX_AMOUNT


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    def __hash__(self):
        return hash(bool(self))


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
