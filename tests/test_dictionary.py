"""
Tests for Dictionary: keys of any type, type constraints, transformations.
"""

import pytest
import datetime
from types import SimpleNamespace

from typedcollections import (
    Dictionary, Pair, TypeSet, KeyCodec,
    TypeMismatch, UnknownKey, DuplicateKey, CollectionError,
)


class Customer:
    def __init__(self, name):
        self.name = name


class Counter:
    def bump(self):
        pass


@pytest.fixture
def abc():
    return Dictionary(source={'a': 1, 'b': 2, 'c': 3})


# =============================================================================
# KEYS OF ANY TYPE
# =============================================================================

class TestKeys:
    """Every value is a usable key, compared strictly."""

    def test_object_list_and_bool_keys(self, codec):
        d = Dictionary('mixed', 'string', codec=codec)
        customer = Customer('Ada')

        d[customer] = 'object'
        d[[1, 2, 3]] = 'list'
        d[True] = 'bool'

        assert len(d) == 3
        assert d[customer] == 'object'
        assert d[[1, 2, 3]] == 'list'
        assert d[True] == 'bool'

    def test_lookalike_object_is_unknown(self):
        d = Dictionary('mixed', 'string')
        d[Customer('Ada')] = 'first'
        with pytest.raises(UnknownKey):
            d[Customer('Ada')]

    def test_one_is_not_true(self):
        d = Dictionary('mixed', 'string')
        d[True] = 'bool'
        with pytest.raises(UnknownKey):
            d[1]
        assert 1 not in d

    def test_four_distinct_keys(self):
        d = Dictionary(None, None)
        for key in (1, 1.0, '1', True):
            d[key] = type(key).__name__
        assert len(d) == 4
        assert d[1.0] == 'float'

    def test_none_and_composite_keys(self):
        d = Dictionary()
        d[None] = 'none'
        d[{'x': 1, 'y': 2}] = 'dict'
        d[(1, 2)] = 'tuple'
        assert d[None] == 'none'
        assert d[{'y': 2, 'x': 1}] == 'dict'
        assert (1, 2) in d
        assert [1, 2] not in d

    def test_callable_key(self):
        d = Dictionary()
        d[len] = 'len'
        assert d[len] == 'len'

    def test_original_key_kept(self):
        key = [1, 2]
        d = Dictionary()
        d[key] = 'v'
        assert d.keys()[0] is key

    def test_unknown_key_is_key_error(self):
        with pytest.raises(KeyError):
            Dictionary()['missing']

    def test_unknown_key_message(self):
        with pytest.raises(UnknownKey) as exc_info:
            Dictionary()['missing']
        assert str(exc_info.value) == "Unknown key: 'missing'."


class TestLookupsLeaveNoTrace:
    """Looking up a key never registers the looked-up value."""

    def test_misses_do_not_grow_registry(self, codec):
        d = Dictionary(None, None, {'a': 1}, codec=codec)

        for _ in range(3):
            assert object() not in d
            assert d.get(datetime.date(2024, 1, 1)) is None
            with pytest.raises(UnknownKey):
                d[[object()]]
            with pytest.raises(UnknownKey):
                d.remove_by_key(object())
            assert not d.contains(object())
            assert d.remove_by_value(object()) == 0

        assert len(codec.registry) == 0

    def test_stored_instances_still_found(self, codec):
        d = Dictionary(None, None, codec=codec)
        obj = object()
        d[obj] = 'bare'
        d[[obj]] = 'wrapped'

        assert obj in d
        assert d[[obj]] == 'wrapped'
        assert d.get(obj) == 'bare'
        assert len(codec.registry) == 1

    def test_bound_method_key(self):
        counter = Counter()
        d = Dictionary()
        d[counter.bump] = 1

        assert counter.bump in d
        assert d[counter.bump] == 1
        assert Counter().bump not in d


class TestConstraints:
    """Type checks run before any lookup."""

    def test_mismatch_before_unknown(self):
        d = Dictionary('string', 'int')
        with pytest.raises(TypeMismatch) as exc_info:
            d[1]
        assert exc_info.value.label == 'key'

    def test_value_checked(self):
        d = Dictionary('string', 'int')
        with pytest.raises(TypeMismatch) as exc_info:
            d['a'] = 'one'
        assert exc_info.value.label == 'value'
        assert 'a' not in d

    def test_in_never_raises(self):
        d = Dictionary('string', 'int', {'a': 1})
        loop = []
        loop.append(loop)

        assert 1 not in d
        assert float('nan') not in Dictionary()
        assert loop not in Dictionary()

    def test_nullable_values(self):
        d = Dictionary('string', '?string')
        d['make'] = None
        assert d['make'] is None

    def test_named_value_type(self):
        d = Dictionary('int', 'Customer')
        d[1] = Customer('Ada')
        with pytest.raises(TypeMismatch):
            d[2] = SimpleNamespace(name='Bob')

    def test_errors_share_a_base(self):
        d = Dictionary('string', 'int')
        for action in (lambda: d[1], lambda: d['missing']):
            with pytest.raises(CollectionError):
                action()


class TestInference:

    def test_inferred_from_source(self):
        d = Dictionary(source={'a': 1})
        assert d.key_types.contains_only('string')
        assert d.value_types.contains_only('int')
        with pytest.raises(TypeMismatch):
            d['b'] = 'x'

    def test_mixed_source(self):
        d = Dictionary(source=[('a', 1), (2, 'b')])
        assert d.key_types.contains_only('string', 'int')
        assert d.value_types.contains_only('int', 'string')

    def test_object_values_inferred_by_class(self):
        d = Dictionary(source={'ada': Customer('Ada')})
        assert d.value_types.match(Customer('Bob'))
        assert not d.value_types.match(SimpleNamespace())

    def test_source_with_keyword_named_class(self):
        class number:
            pass

        d = Dictionary(source={'n': number()})
        assert d.value_types.contains_only('object')

    def test_empty_source_accepts_anything(self):
        d = Dictionary()
        d[1] = 'a'
        d['b'] = [2]
        assert len(d) == 2

    def test_explicit_types_not_inferred(self):
        d = Dictionary('string', None, {'a': 1})
        d['b'] = 'anything'
        assert d.value_types.is_empty()

    def test_typeset_arguments(self):
        d = Dictionary(TypeSet('string'), TypeSet([int, float]))
        d['pi'] = 3.14
        assert d.value_types.contains_only('int', 'float')


# =============================================================================
# MUTATION
# =============================================================================

class TestMutation:

    def test_replace_keeps_position(self, abc):
        abc['a'] = 10
        assert abc.keys() == ['a', 'b', 'c']
        assert abc.values() == [10, 2, 3]

    def test_old_pair_unchanged(self, abc):
        before = abc.to_list()[0]
        abc['a'] = 10
        assert before == Pair('a', 1)
        assert abc.to_list()[0] == Pair('a', 10)

    def test_add(self):
        d = Dictionary()
        assert d.add('a', 1) is d
        d.add(Pair('b', 2))
        d.add('c', None)
        assert d.items() == [('a', 1), ('b', 2), ('c', None)]

    def test_add_requires_pair(self):
        with pytest.raises(TypeError):
            Dictionary().add('a')

    def test_update(self):
        d = Dictionary()
        d.update({'a': 1}).update([('b', 2), Pair('c', 3)])
        assert d.keys() == ['a', 'b', 'c']

    def test_update_from_dictionary(self, abc):
        d = Dictionary().update(abc)
        assert d == abc

    def test_get(self, abc):
        assert abc.get('a') == 1
        assert abc.get('z') is None
        assert abc.get('z', 0) == 0
        with pytest.raises(TypeMismatch):
            abc.get(1)

    def test_remove_by_key(self, abc):
        assert abc.remove_by_key('b') == 2
        assert abc.keys() == ['a', 'c']
        with pytest.raises(UnknownKey):
            abc.remove_by_key('b')

    def test_del(self, abc):
        del abc['a']
        assert 'a' not in abc
        with pytest.raises(UnknownKey):
            del abc['a']

    def test_remove_by_value(self):
        d = Dictionary(source={'a': 1, 'b': 2, 'c': 1})
        assert d.remove_by_value(1) == 2
        assert d.keys() == ['b']
        assert d.remove_by_value(5) == 0

    def test_remove_by_value_is_strict(self):
        d = Dictionary(None, None, {'a': 1, 'b': True})
        assert d.remove_by_value(True) == 1
        assert d.keys() == ['a']

    def test_clear(self, abc):
        assert abc.clear() is abc
        assert abc.is_empty()
        assert len(abc) == 0


# =============================================================================
# INSPECTION
# =============================================================================

class TestInspection:

    def test_iteration_yields_tuples(self, abc):
        assert list(abc) == [('a', 1), ('b', 2), ('c', 3)]
        assert dict(abc) == {'a': 1, 'b': 2, 'c': 3}

    def test_pairs(self, abc):
        assert [pair.key for pair in abc.pairs()] == ['a', 'b', 'c']

    def test_key_exists(self, abc):
        assert abc.key_exists('a')
        assert not abc.key_exists('z')
        assert not abc.key_exists(1)

    def test_contains_value(self):
        d = Dictionary(source={'a': 1})
        assert d.contains(1)
        assert not d.contains(True)
        assert not d.contains(1.0)

    def test_equal(self, abc):
        same = Dictionary(None, None, [('a', 1), ('b', 2), ('c', 3)])
        reordered = Dictionary(source=[('b', 2), ('a', 1), ('c', 3)])
        assert abc == same
        assert abc.equal(same)
        assert abc != reordered
        assert abc != {'a': 1, 'b': 2, 'c': 3}

    def test_equal_is_strict(self):
        assert Dictionary(source={'a': 1}) != Dictionary(source={'a': True})

    def test_unhashable(self, abc):
        with pytest.raises(TypeError):
            hash(abc)

    def test_repr(self):
        d = Dictionary('string', 'int', {'a': 1})
        assert repr(d) == "Dictionary(TypeSet('string'), TypeSet('int'), {'a': 1})"


class TestCombine:

    def test_combine(self):
        d = Dictionary.combine(['a', 'b'], [1, 2])
        assert d.items() == [('a', 1), ('b', 2)]
        assert d.key_types.contains_only('string')
        assert d.value_types.contains_only('int')

    def test_without_inference(self):
        d = Dictionary.combine(['a'], [1], infer_types=False)
        assert d.key_types.is_empty()
        assert d.value_types.is_empty()

    def test_count_mismatch(self):
        with pytest.raises(ValueError):
            Dictionary.combine(['a', 'b'], [1])

    def test_duplicate(self):
        with pytest.raises(DuplicateKey) as exc_info:
            Dictionary.combine(['a', 'a'], [1, 2])
        assert exc_info.value.key == 'a'
        assert exc_info.value.operation == 'combine'


# =============================================================================
# SORTING
# =============================================================================

class TestSorting:

    def test_sort_by_key(self):
        d = Dictionary(source={'b': 2, 'a': 1, 'c': 3})
        assert d.sort_by_key() is d
        assert d.keys() == ['a', 'b', 'c']

    def test_sort_by_value_reverse(self, abc):
        abc.sort_by_value(reverse=True)
        assert abc.values() == [3, 2, 1]

    def test_sort_defaults_to_key(self):
        d = Dictionary(source={'b': 2, 'a': 1})
        assert d.sort().keys() == ['a', 'b']

    def test_sort_by_callback(self, abc):
        abc.sort(lambda pair: -pair.value)
        assert abc.keys() == ['c', 'b', 'a']

    def test_lookup_after_sort(self, abc):
        abc.sort_by_value(reverse=True)
        assert abc['a'] == 1


# =============================================================================
# TRANSFORMATIONS
# =============================================================================

class TestFilter:

    def test_keeps_matching(self, abc):
        result = abc.filter(lambda key, value: value > 1)
        assert result.items() == [('b', 2), ('c', 3)]

    def test_key_and_value(self, abc):
        result = abc.filter(lambda key, value: key != 'a' and value < 3)
        assert result.keys() == ['b']

    def test_no_matches(self, abc):
        assert abc.filter(lambda key, value: False).is_empty()

    def test_empty(self):
        assert Dictionary().filter(lambda key, value: True).is_empty()

    def test_preserves_constraints(self):
        d = Dictionary('string', 'int', {'a': 1})
        result = d.filter(lambda key, value: True)
        assert result.key_types == d.key_types
        assert result.value_types == d.value_types
        assert result.codec is d.codec

    def test_result_is_independent(self, abc):
        result = abc.filter(lambda key, value: True)
        result['a'] = 100
        assert abc['a'] == 1

    def test_callback_must_return_bool(self, abc):
        with pytest.raises(TypeError):
            abc.filter(lambda key, value: 1)


class TestFlip:

    def test_swaps(self):
        d = Dictionary(source={'a': 1, 'b': 2})
        flipped = d.flip()
        assert flipped.items() == [(1, 'a'), (2, 'b')]
        assert flipped.key_types.contains_only('int')
        assert flipped.value_types.contains_only('string')

    def test_empty(self):
        assert Dictionary().flip().is_empty()

    def test_duplicate_values(self):
        d = Dictionary(source={'a': 1, 'b': 1})
        with pytest.raises(DuplicateKey) as exc_info:
            d.flip()
        assert exc_info.value.operation == 'flip'

    def test_composite_values_become_keys(self):
        d = Dictionary(source={'a': [1, 2]})
        assert d.flip()[[1, 2]] == 'a'


class TestMap:

    def test_transforms_values(self, abc):
        result = abc.map(lambda pair: Pair(pair.key, pair.value * 10))
        assert result.values() == [10, 20, 30]

    def test_transforms_keys(self, abc):
        result = abc.map(lambda pair: Pair(pair.key.upper(), pair.value))
        assert result.keys() == ['A', 'B', 'C']

    def test_infers_types(self, abc):
        result = abc.map(lambda pair: Pair(pair.value, str(pair.key)))
        assert result.key_types.contains_only('int')
        assert result.value_types.contains_only('string')

    def test_empty(self):
        assert Dictionary().map(lambda pair: pair).is_empty()

    def test_callback_must_return_pair(self, abc):
        with pytest.raises(TypeError, match='Map callback must return a Pair'):
            abc.map(lambda pair: (pair.key, pair.value))

    def test_duplicate_keys(self, abc):
        with pytest.raises(DuplicateKey) as exc_info:
            abc.map(lambda pair: Pair('same', pair.value))
        assert exc_info.value.operation == 'map'


class TestMerge:

    def test_combines(self):
        left = Dictionary(source={'a': 1})
        right = Dictionary(source={'b': 2})
        assert left.merge(right).items() == [('a', 1), ('b', 2)]

    def test_overlap_other_wins_in_place(self):
        left = Dictionary(source={'a': 1, 'b': 2})
        right = Dictionary(source={'b': 20, 'c': 3})
        assert left.merge(right).items() == [('a', 1), ('b', 20), ('c', 3)]

    def test_originals_unchanged(self, abc):
        other = Dictionary(source={'z': 26})
        abc.merge(other)
        assert len(abc) == 3
        assert len(other) == 1

    def test_empty(self, abc):
        assert abc.merge(Dictionary(source={'q': 0}).filter(lambda k, v: False)) == abc

    def test_constraints_union(self):
        left = Dictionary('string', 'int')
        right = Dictionary('int', 'string')
        merged = left.merge(right)
        assert merged.key_types.contains_only('string', 'int')
        assert merged.value_types.contains_only('int', 'string')

    def test_unconstrained_side(self):
        left = Dictionary('string', 'int', {'a': 1})
        right = Dictionary(None, None, {2.5: [1]})
        merged = left.merge(right)
        assert merged.key_types.any_ok()
        assert merged[2.5] == [1]

    def test_object_keys_survive(self):
        codec = KeyCodec()
        customer = Customer('Ada')
        left = Dictionary(None, None, codec=codec)
        right = Dictionary(None, None, {customer: 'ada'}, codec=codec)
        assert left.merge(right)[customer] == 'ada'
