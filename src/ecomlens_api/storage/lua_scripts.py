"""Redis Lua scripts for atomic operations."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Compare-and-set a string blob
# Keys: [blob_key]
# Args: [has_expected (0/1), expected_value, new_value]
# Returns: 1 if written, 0 if the stored value changed underneath us
COMPARE_AND_SET_SCRIPT = """
local key = KEYS[1]
local has_expected = ARGV[1]
local expected = ARGV[2]
local new_value = ARGV[3]

local current = redis.call('GET', key)

if has_expected == '0' then
    -- Caller saw no value; refuse if someone created it since
    if current then
        return 0
    end
elseif current ~= expected then
    return 0
end

redis.call('SET', key, new_value)
return 1
"""


class LuaScripts:
    """Manager for Lua script SHA hashes."""

    def __init__(self) -> None:
        self.compare_and_set_sha: str | None = None
        self._loaded = False

    async def load(self, redis_client: "Redis") -> None:
        """Load all scripts into Redis and store SHA hashes."""
        if self._loaded:
            return

        self.compare_and_set_sha = await redis_client.script_load(COMPARE_AND_SET_SCRIPT)
        self._loaded = True

    def reset(self) -> None:
        """Reset loaded state (for testing)."""
        self._loaded = False
        self.compare_and_set_sha = None


# Global instance
lua_scripts = LuaScripts()
