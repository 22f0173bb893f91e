"""User-visible output lines shared by the compiler, the emitted C# and the
live executor."""

MISSING_PARAMETERS = "Cosmos parameters missing."
MISSING_ACCOUNT_KEY = "Cosmos AccountKey not provided (check environment variable)."


def env_var_not_set(name: str) -> str:
    return f"Environment variable {name} not set."


__all__ = ["MISSING_PARAMETERS", "MISSING_ACCOUNT_KEY", "env_var_not_set"]
