"""Category label rules."""


class InvalidCategoryError(ValueError):
    """Category name is empty or blank."""
    pass


MAX_CATEGORY_LENGTH = 100


def clean_category_name(name: str) -> str:
    """
    Strip surrounding whitespace and reject names that end up empty.

    Raises:
        InvalidCategoryError: if the name is not a usable label
    """
    if not isinstance(name, str):
        raise InvalidCategoryError(f"Category name must be a string, got {type(name).__name__}")
    cleaned = name.strip()
    if not cleaned:
        raise InvalidCategoryError("Category name cannot be empty")
    if len(cleaned) > MAX_CATEGORY_LENGTH:
        raise InvalidCategoryError(
            f"Category name longer than {MAX_CATEGORY_LENGTH} characters"
        )
    return cleaned
