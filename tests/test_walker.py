"""
Tests for the record walker (apply).

Covers every field shape the walker dispatches on, pydantic models,
rejection of immutable inputs, and behavior when an extension fails.
"""
import copy
from dataclasses import dataclass

import pytest

from fieldnorm import apply
from fieldnorm.core.errors import NotAPointerError, TransformError
from fieldnorm.walk.walker import RecordWalker
from sample_records import (
    Account,
    Address,
    Code,
    Color,
    Customer,
    Email,
    FrozenPerson,
    FrozenProfile,
    NullString,
    Person,
    Profile,
    StrictProfile,
    Tagged,
    Ticket,
)


@dataclass
class ExtendedNullString(NullString):
    note: str = ""


def make_customer():
    return Customer(
        email="  Jane.Doe@EXAMPLE.com ",
        display_name="  keep me  ",
        nickname=NullString(string="  JD  ", valid=True),
        address=Address(street="  main street ", city=" springfield "),
        previous_addresses=[Address(street=" old road ", city=None), None],
        aliases=["  jOHN  smith ", None],
        codes=("ab", "cd"),
        addresses_by_label={"Home ": Address(street=" x ave "), "empty": None},
        notes={"k": " v "},
        referrer=None,
        work_email=Email("Someone@EXAMPLE.ORG"),
    )


class TestScalars:
    """Tests for top-level string fields."""

    def test_annotated_fields_rewritten(self, fake, pad):
        for _ in range(50):
            first, last = fake.first_name(), fake.last_name()
            person = Person(first_name=pad(first), last_name=pad(last), nickname=pad("x"))

            apply(person)

            assert person.first_name == first
            assert person.last_name == last

    def test_unannotated_and_non_string_untouched(self):
        person = Person(first_name=" a ", nickname="  nick  ", age=3, active=True)

        apply(person)

        assert person.nickname == "  nick  "
        assert person.age == 3
        assert person.active is True

    def test_private_field_untouched(self):
        person = Person(_secret="  hidden  ")
        apply(person)
        assert person._secret == "  hidden  "

    def test_annotated_marker(self):
        customer = make_customer()
        apply(customer)
        assert customer.email == "Jane.Doe@example.com"
        assert customer.display_name == "  keep me  "

    def test_optional_string(self):
        customer = make_customer()
        apply(customer)
        assert customer.work_email == "Someone@example.org"

        customer.work_email = None
        apply(customer)
        assert customer.work_email is None

    def test_str_subclass_preserved(self):
        tagged = Tagged(code=Code("  ab "), color=Color.BLUE, both=" MiXed ", anything=" x ")

        apply(tagged)

        assert tagged.code == "AB"
        assert type(tagged.code) is Code
        assert tagged.color is Color.BLUE
        assert tagged.both == " MIXED "
        assert tagged.anything == " x "


class TestNestedRecords:
    """Tests for nested records and wrapped scalars."""

    def test_nested_record(self):
        customer = make_customer()
        apply(customer)
        assert customer.address.street == "Main Street"
        assert customer.address.city == "SPRINGFIELD"

    def test_optional_nested_record(self):
        customer = make_customer()
        customer.referrer = Address(street=" a b ")

        apply(customer)

        assert customer.referrer.street == "A B"
        assert customer.referrer.city is None

    def test_wrapped_scalar_uses_outer_annotation(self):
        customer = make_customer()
        apply(customer)
        assert customer.nickname.string == "jd"
        assert customer.nickname.valid is True

    def test_wrapped_scalar_decided_by_declared_type(self):
        """Test a subclass value with extra fields still gets only its string rewritten."""
        customer = make_customer()
        customer.nickname = ExtendedNullString(string="  JD  ", valid=True, note="  keep  ")

        apply(customer)

        assert customer.nickname.string == "jd"
        assert customer.nickname.note == "  keep  "

    def test_unannotated_wrapped_scalar_untouched(self):
        account = Account(alias=NullString(string=" Bob ", valid=True))
        apply(account)
        assert account.alias.string == " Bob "

    def test_annotated_multi_field_record_uses_own_annotations(self):
        """Test an outer annotation on a non-wrapper record does not leak inward."""
        account = Account(home=Address(street=" elm st ", city=" paris "))

        apply(account)

        assert account.home.street == "Elm St"
        assert account.home.city == "PARIS"

    def test_frozen_nested_record_skipped(self):
        owner = FrozenPerson(first_name="  frozen  ")
        account = Account(owner=owner)

        apply(account)

        assert account.owner is owner
        assert account.owner.first_name == "  frozen  "


class TestSequences:
    """Tests for list and tuple fields."""

    def test_list_of_records(self):
        customer = make_customer()
        apply(customer)
        assert customer.previous_addresses[0].street == "Old Road"
        assert customer.previous_addresses[0].city is None
        assert customer.previous_addresses[1] is None

    def test_list_of_strings_in_place(self):
        customer = make_customer()
        aliases = customer.aliases

        apply(customer)

        assert customer.aliases is aliases
        assert aliases == ["John Smith", None]

    def test_tuple_of_strings_rebuilt(self):
        customer = make_customer()
        apply(customer)
        assert customer.codes == ("AB", "CD")

    def test_empty_and_missing_sequences(self):
        customer = make_customer()
        customer.aliases = []
        customer.previous_addresses = None

        apply(customer)

        assert customer.aliases == []
        assert customer.previous_addresses is None


class TestMappings:
    """Tests for mapping fields."""

    def test_record_values_replaced_by_normalized_copy(self):
        customer = make_customer()
        original = customer.addresses_by_label["Home "]

        apply(customer)

        updated = customer.addresses_by_label["Home "]
        assert updated.street == "X Ave"
        assert updated is not original
        assert original.street == " x ave "

    def test_keys_untouched(self):
        customer = make_customer()
        apply(customer)
        assert list(customer.addresses_by_label) == ["Home ", "empty"]
        assert customer.addresses_by_label["empty"] is None

    def test_string_values_untouched(self):
        customer = make_customer()
        apply(customer)
        assert customer.notes == {"k": " v "}


class TestPydantic:
    """Tests for pydantic model records."""

    def test_model_fields(self):
        profile = Profile(
            handle="  JaneDoe ",
            bio=" <b>hi</b> ",
            website=" HTTP://EXAMPLE.COM ",
            interests=[" Machine Learning ", "dataScience"],
            address=Address(street=" elm st "),
            untouched=" keep ",
        )

        apply(profile)

        assert profile.handle == "janedoe"
        assert profile.bio == "&lt;b&gt;hi&lt;/b&gt;"
        assert profile.website == "http://example.com"
        assert profile.interests == ["machine-learning", "data-science"]
        assert profile.address.street == "Elm St"
        assert profile.untouched == " keep "

    def test_optional_none(self):
        profile = Profile(website=None)
        apply(profile)
        assert profile.website is None

    def test_validate_assignment(self):
        profile = StrictProfile(handle="  abc ")
        apply(profile)
        assert profile.handle == "ABC"


class TestRejection:
    """Tests for inputs that cannot be mutated in place."""

    @pytest.mark.parametrize(
        "value",
        [
            "  text  ",
            b"bytes",
            42,
            1.5,
            None,
            (" a ",),
            frozenset({"a"}),
            Person,
            FrozenPerson(first_name=" a "),
            FrozenProfile(handle=" a "),
        ],
    )
    def test_not_a_pointer(self, value):
        with pytest.raises(NotAPointerError):
            apply(value)

    def test_not_a_pointer_is_type_error(self):
        with pytest.raises(TypeError):
            apply("text")

    @pytest.mark.parametrize("value", [[" a "], {"k": " v "}])
    def test_other_mutable_values_ignored(self, value):
        before = copy.copy(value)
        apply(value)
        assert value == before

    def test_frozen_input_left_untouched(self):
        person = FrozenPerson(first_name=" a ")
        with pytest.raises(NotAPointerError):
            apply(person)
        assert person.first_name == " a "


class TestExtensions:
    """Tests for extension transforms during a walk."""

    def test_registry_used(self, registry):
        registry.register("shout", lambda s: s.upper() + "!")
        ticket = Ticket(first=" a ", subject=" hello ", last=" c ")

        apply(ticket, registry)

        assert ticket.subject == "HELLO!"

    def test_missing_extension_skipped(self, registry):
        ticket = Ticket(subject=" hello ")
        apply(ticket, registry)
        assert ticket.subject == "hello"

    def test_failure_leaves_partial_result(self, registry):
        """Test fields before the failing one stay rewritten; later ones are not reached."""
        def shout(value):
            raise RuntimeError("no shouting")

        registry.register("shout", shout)
        ticket = Ticket(first=" a ", subject=" b ", last=" c ")

        with pytest.raises(TransformError) as exc_info:
            apply(ticket, registry)

        assert exc_info.value.directive == "shout"
        assert ticket.first == "a"
        assert ticket.subject == " b "
        assert ticket.last == " c "


class TestWalker:
    """Tests for RecordWalker bookkeeping and idempotence."""

    def test_values_rewritten(self):
        walker = RecordWalker()
        walker.walk(Person(first_name=" a ", last_name="b"))
        assert walker.values_rewritten == 1

    def test_counts_container_elements(self):
        walker = RecordWalker()
        walker.walk(make_customer())
        # email, nickname, address x2, previous street, alias, codes x2,
        # mapping street, work_email
        assert walker.values_rewritten == 10

    def test_idempotent(self):
        customer = make_customer()
        apply(customer)
        snapshot = copy.deepcopy(customer)

        walker = RecordWalker()
        walker.walk(customer)

        assert customer == snapshot
        assert walker.values_rewritten == 0
