"""Notice filter prompts and query-string helpers."""

from urllib.parse import parse_qsl, urlencode

from telegram_bot.handlers.schemas import FilterKind

PROMPT_MARKER = "⚙️"

FILTER_KINDS: tuple[FilterKind, ...] = (
    FilterKind(
        command="/category",
        keyword="카테고리",
        param="category",
        label="카테고리",
        prompt=f"{PROMPT_MARKER} 카테고리 필터를 등록합니다. 알림을 받고 싶은 공지 분류를 입력해주세요.",
    ),
    FilterKind(
        command="/department",
        keyword="부서",
        param="department",
        label="공지부서",
        prompt=f"{PROMPT_MARKER} 공지부서 필터를 등록합니다. 알림을 받고 싶은 공지부서를 입력해주세요.",
    ),
    FilterKind(
        command="/keyword",
        keyword="키워드",
        param="search",
        label="키워드",
        prompt=f"{PROMPT_MARKER} 키워드 필터를 등록합니다. 알림을 받고 싶은 공지 키워드를 입력해주세요.",
    ),
)


def find_filter_by_command(command: str) -> FilterKind | None:
    """Find the filter kind whose command prefixes the given text.

    Args:
        command: Trimmed message text.

    Returns:
        The matching FilterKind or None.
    """
    for kind in FILTER_KINDS:
        if command.startswith(kind.command):
            return kind
    return None


def find_filter_by_prompt(question: str) -> FilterKind | None:
    """Find the filter kind a prompt message was asking for.

    Only texts carrying the prompt marker count as prompts.

    Args:
        question: Trimmed text of the message being replied to.

    Returns:
        The matching FilterKind or None.
    """
    if not question.startswith(PROMPT_MARKER):
        return None
    for kind in FILTER_KINDS:
        if kind.keyword in question:
            return kind
    return None


def set_query_param(query_params: str, key: str, value: str) -> str:
    """Set one key of an url-encoded query string, keeping the others.

    Args:
        query_params: Existing url-encoded filters, may be empty.
        key: The key to set.
        value: The new value.

    Returns:
        The updated url-encoded filters.
    """
    pairs = parse_qsl(query_params, keep_blank_values=True)
    updated: list[tuple[str, str]] = []
    replaced = False
    for existing_key, existing_value in pairs:
        if existing_key != key:
            updated.append((existing_key, existing_value))
        elif not replaced:
            updated.append((key, value))
            replaced = True
    if not replaced:
        updated.append((key, value))
    return urlencode(updated)


def describe_query_params(query_params: str) -> list[str]:
    """Render stored filters as human-readable lines.

    Args:
        query_params: Url-encoded filters.

    Returns:
        One line per filter, in storage order.
    """
    labels = {kind.param: kind.label for kind in FILTER_KINDS}
    return [
        f"• {labels.get(key, key)}: {value}" for key, value in parse_qsl(query_params, keep_blank_values=True)
    ]
