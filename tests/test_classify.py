import pytest

from clipvault.classify import is_password_like


@pytest.mark.parametrize(
    "text",
    [
        "abcdefghijklmnop",  # 16 chars, no space
        "aaaaaaaaaaaaaaaaaaaaaaaa",
        "Secret123456",  # 12 chars, mixed classes
        "hunter2hunter",
        "  abcdefghijklmnop  ",
    ],
)
def test_password_like(text):
    assert is_password_like(text)


@pytest.mark.parametrize(
    "text",
    [
        "hello world",
        "correct horse battery staple",
        "short",
        "abcdefghijkl",  # 12 chars, single class
        "",
        None,
        12345678901234567,
    ],
)
def test_not_password_like(text):
    assert not is_password_like(text)
