"""
Разбиение текста на слова, окна показа и блоки
"""

from typing import List


def split_words(content: str) -> List[str]:
    """Слова текста по пробельным символам, пустые строки отбрасываются"""
    return content.split()


def chunk_words(words: List[str], size: int) -> List[List[str]]:
    """
    Разбить слова на подряд идущие группы по size штук
    Последняя группа может быть короче
    """
    if size <= 0:
        raise ValueError("size must be positive")
    return [words[i:i + size] for i in range(0, len(words), size)]


def window_text(words: List[str], start: int, size: int) -> str:
    """Текст окна из size слов начиная с позиции start (пусто за концом текста)"""
    if start >= len(words):
        return ""
    return " ".join(words[start:start + size])
