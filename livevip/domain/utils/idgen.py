from ulid import ULID


def new_ulid(prefix: str | None = None) -> str:
    value = str(ULID()).lower()
    return f"{prefix}{value}" if prefix else value


def new_comment_id() -> str:
    return new_ulid("cm_")


def new_stream_id() -> str:
    return new_ulid("st_")
