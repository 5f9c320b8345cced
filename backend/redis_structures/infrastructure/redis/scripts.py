"""
Clamped Increment Scripts

Server-side Lua for atomic increment-then-clamp. All four variants
(integer/float x max/min) follow the same contract:

1. increment with the native INCRBY / INCRBYFLOAT,
2. compare the result with the bound,
3. overwrite the key with the bound when it was crossed (TTL kept),
4. return the final value.

Every variant returns text: the stored counter or the bound as sent by the
client. Lua numbers are doubles, so integer variants compare the decimal
strings directly and never convert through a number; float variants return
the INCRBYFLOAT reply untouched. No precision is lost on the way back.
"""

from dataclasses import dataclass
from typing import Union

Number = Union[int, float]

# Redis replies and str(int) are canonical: no sign on zero, no leading zeros
_INTEGER_TEMPLATE = """\
local function compare_integers(a, b)
    local a_negative = string.sub(a, 1, 1) == '-'
    local b_negative = string.sub(b, 1, 1) == '-'
    if a_negative ~= b_negative then
        if a_negative then return -1 end
        return 1
    end
    local order = 0
    if #a ~= #b then
        if #a < #b then order = -1 else order = 1 end
    elseif a ~= b then
        if a < b then order = -1 else order = 1 end
    end
    if a_negative then return -order end
    return order
end
redis.call('{increment_command}', KEYS[1], ARGV[1])
local current = redis.call('get', KEYS[1])
if compare_integers(current, ARGV[2]) {comparison} 0 then
    redis.call('set', KEYS[1], ARGV[2], 'KEEPTTL')
    return ARGV[2]
end
return current
"""

_FLOAT_TEMPLATE = """\
local bound = tonumber(ARGV[2])
local reply = redis.call('{increment_command}', KEYS[1], ARGV[1])
local current = tonumber(reply)
if current {comparison} bound then
    redis.call('set', KEYS[1], ARGV[2], 'KEEPTTL')
    return ARGV[2]
end
return reply
"""


@dataclass(frozen=True)
class ClampScript:
    """
    Description of one clamped-increment variant.

    Attributes:
        name: Script identifier used in logs and errors
        increment_command: Native Redis increment command
        comparison: Lua operator that detects a crossed bound
        is_float: Whether the variant works on floating-point values
    """

    name: str
    increment_command: str
    comparison: str
    is_float: bool

    @property
    def body(self) -> str:
        """Rendered Lua source."""
        template = _FLOAT_TEMPLATE if self.is_float else _INTEGER_TEMPLATE
        return template.format(
            increment_command=self.increment_command, comparison=self.comparison
        )

    def encode_args(self, delta: Number, bound: Number) -> list:
        """Render script arguments; floats use repr() for exact round trips."""
        if self.is_float:
            return [repr(float(delta)), repr(float(bound))]
        return [int(delta), int(bound)]

    def parse_result(self, result) -> Number:
        """Convert the script reply to the caller's numeric type."""
        if isinstance(result, bytes):
            result = result.decode("ascii")
        if self.is_float:
            return float(result)
        return int(result)


INCREMENT_LIMIT_BY_MAX = ClampScript(
    name="increment_limit_by_max",
    increment_command="incrby",
    comparison=">",
    is_float=False,
)
INCREMENT_LIMIT_BY_MIN = ClampScript(
    name="increment_limit_by_min",
    increment_command="incrby",
    comparison="<",
    is_float=False,
)
INCREMENT_FLOAT_LIMIT_BY_MAX = ClampScript(
    name="increment_float_limit_by_max",
    increment_command="incrbyfloat",
    comparison=">",
    is_float=True,
)
INCREMENT_FLOAT_LIMIT_BY_MIN = ClampScript(
    name="increment_float_limit_by_min",
    increment_command="incrbyfloat",
    comparison="<",
    is_float=True,
)

CLAMP_SCRIPTS = (
    INCREMENT_LIMIT_BY_MAX,
    INCREMENT_LIMIT_BY_MIN,
    INCREMENT_FLOAT_LIMIT_BY_MAX,
    INCREMENT_FLOAT_LIMIT_BY_MIN,
)


def select_clamp_script(delta: Number, bound: Number, upper: bool) -> ClampScript:
    """
    Pick the variant matching the operand types.

    Args:
        delta: Increment amount
        bound: Clamp bound
        upper: True for a maximum bound, False for a minimum

    Returns:
        Matching ClampScript
    """
    for value in (delta, bound):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(
                f"Clamped increment operands must be int or float, got {type(value).__name__}"
            )
    if isinstance(delta, float) or isinstance(bound, float):
        return INCREMENT_FLOAT_LIMIT_BY_MAX if upper else INCREMENT_FLOAT_LIMIT_BY_MIN
    return INCREMENT_LIMIT_BY_MAX if upper else INCREMENT_LIMIT_BY_MIN
