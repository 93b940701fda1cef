# Copyright 2019 Joan Puig
# See LICENSE for details


from typing import Iterable, Set


__version__ = '0.0.1'


def duplicates(elements: Iterable) -> Set:
    """
    Returns a set of elements that appear more than once in the input iterable
    """
    s = set()
    return set(element for element in elements if element in s or s.add(element))
