from collections import Counter

import pytest

from oslabs.lockfree import LockFreeStack, TaggedPointer, concurrent_push


def test_stack_is_lifo():
    stack = LockFreeStack()
    for value in (1, 2, 3):
        stack.push(value)
    assert [stack.pop(), stack.pop(), stack.pop()] == [3, 2, 1]


def test_pop_empty_raises():
    stack = LockFreeStack()
    with pytest.raises(IndexError):
        stack.pop()


def test_len_tracks_pushes_and_pops():
    stack = LockFreeStack()
    assert len(stack) == 0
    for value in range(5):
        stack.push(value)
    assert len(stack) == 5
    stack.pop()
    assert len(stack) == 4


def test_concurrent_push_keeps_every_item():
    stack = concurrent_push(4, 1000)
    assert len(stack) == 4000
    popped = []
    while stack:
        popped.append(stack.pop())
    assert Counter(popped) == Counter({value: 4 for value in range(1000)})
    assert len(stack) == 0


def test_concurrent_push_rejects_negative():
    with pytest.raises(ValueError):
        concurrent_push(-1, 10)


def test_tagged_pointer_bump_increments_tag():
    pointer = TaggedPointer(0x7FFFC0001234, 7)
    moved = pointer.bump(0x1000)
    assert moved.address == 0x1000
    assert moved.tag == pointer.tag + 1


def test_tagged_pointer_detects_aba():
    start = TaggedPointer(0x7FFFC0001234, 5)
    back_again = start.bump(0x2000).bump(start.address)
    assert back_again.address == start.address
    assert back_again != start


def test_tagged_pointer_rejects_wide_address():
    with pytest.raises(ValueError):
        TaggedPointer(1 << 48, 0)
    with pytest.raises(ValueError):
        TaggedPointer(0x1000, -1)