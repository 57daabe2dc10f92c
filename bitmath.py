def align(value: int, alignment: int) -> int:
    """
    Rounds value up to the next multiple of alignment.

    >>> align(0x21, 0x20)
    64
    >>> align(0x40, 0x20)
    64
    """
    return value + padding(value, alignment)


def padding(value: int, alignment: int) -> int:
    """
    Number of bytes needed after value to reach the next multiple of alignment.

    >>> padding(3, 4)
    1
    >>> padding(8, 4)
    0
    """
    return -value % alignment


if __name__ == "__main__":
    import doctest
    doctest.testmod(verbose=True)
