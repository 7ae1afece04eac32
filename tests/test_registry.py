import pytest

from flag_registry import LONG_ONLY, Flags, FlagsFrozenError, LongOption


def noop():
    pass


class TestAdd:
    """Test suite for declaring flags with Flags.add."""

    def test_add_returns_registry_for_chaining(self):
        """Test that add returns the same registry so declarations can chain."""
        flags = Flags()
        assert flags.add("verbose", "v", "Verbose", noop) is flags

    def test_descriptors_in_registration_order(self):
        """Test that descriptors keep the order in which flags were added."""
        flags = (
            Flags()
            .add("zeta", "z", "Last letter", noop)
            .add("alpha", LONG_ONLY, "Long only", noop)
            .add("mid", "m", "VALUE", "Takes a value", lambda text: None)
        )
        assert [d.name for d in flags.descriptors] == ["zeta", "alpha", "mid"]

    def test_short_code_is_character_ordinal(self):
        """Test that a flag with a short form is identified by its ordinal."""
        flags = Flags().add("verbose", "v", "Verbose", noop)
        assert flags.descriptors[0].code == ord("v")

    def test_long_only_codes_count_down_from_minus_two(self):
        """Test synthetic code allocation for flags without a short form."""
        flags = (
            Flags()
            .add("first", LONG_ONLY, "First", noop)
            .add("verbose", "v", "Verbose", noop)
            .add("second", LONG_ONLY, "N", "Second", lambda text: None)
            .add("third", LONG_ONLY, "Third", noop)
        )
        codes = [d.code for d in flags.descriptors]
        assert codes == [-2, ord("v"), -3, -4]

    @pytest.mark.parametrize("count", [1, 5, 40])
    def test_long_only_codes_are_distinct_and_disjoint(self, count):
        """Test that K long-only flags get K distinct codes clear of short codes."""
        flags = Flags().add("alpha", "a", "A", noop).add("bravo", "b", "B", noop)
        for i in range(count):
            flags.add(f"long{i}", LONG_ONLY, f"Long {i}", noop)

        long_codes = [d.code for d in flags.descriptors if d.short is None]
        short_codes = {d.code for d in flags.descriptors if d.short is not None}
        assert len(set(long_codes)) == count
        assert not set(long_codes) & short_codes
        assert long_codes == list(range(-2, -2 - count, -1))

    def test_zero_argument_form_has_no_metavar(self):
        """Test that the four-argument form declares a flag without an argument."""
        flags = Flags().add("verbose", "v", "Verbose", noop)
        descriptor = flags.descriptors[0]
        assert descriptor.metavar is None
        assert descriptor.takes_argument is False
        assert descriptor.help == "Verbose"

    def test_general_form_with_metavar_takes_argument(self):
        """Test that a metavar marks the flag as taking an argument."""
        flags = Flags().add("output", "o", "FILE", "Output file", lambda text: None)
        descriptor = flags.descriptors[0]
        assert descriptor.metavar == "FILE"
        assert descriptor.takes_argument is True

    def test_short_only_flag(self):
        """Test that a flag may omit its long name if it has a short one."""
        flags = Flags().add(None, "x", "Short only", noop)
        assert flags.descriptors[0].name is None
        assert flags.short_options == "x"
        assert flags.long_options == ()


class TestAddErrors:
    """Test suite for the programming errors rejected by Flags.add."""

    def test_duplicate_short_name_raises(self):
        flags = Flags().add("verbose", "v", "Verbose", noop)
        with pytest.raises(ValueError) as exc:
            flags.add("version", "v", "Version", noop)
        assert "Flag name conflict" in str(exc.value)

    def test_duplicate_long_name_raises(self):
        flags = Flags().add("verbose", "v", "Verbose", noop)
        with pytest.raises(ValueError) as exc:
            flags.add("verbose", LONG_ONLY, "Again", noop)
        assert "Flag name conflict: --verbose" in str(exc.value)

    def test_failed_add_leaves_registry_unchanged(self):
        flags = Flags().add("verbose", "v", "Verbose", noop)
        with pytest.raises(ValueError):
            flags.add("verbose", "w", "Again", noop)
        assert len(flags.descriptors) == 1

    @pytest.mark.parametrize("short", ["", "ab", ":", "-", "+", " "])
    def test_invalid_short_name_raises(self, short):
        with pytest.raises(ValueError, match="Invalid short flag name"):
            Flags().add("name", short, "Help", noop)

    @pytest.mark.parametrize("name", ["", "--verbose", "out=file", "two words"])
    def test_invalid_long_name_raises(self, name):
        with pytest.raises(ValueError, match="Invalid long flag name"):
            Flags().add(name, "x", "Help", noop)

    def test_flag_without_any_name_raises(self):
        with pytest.raises(ValueError):
            Flags().add(None, LONG_ONLY, "Nameless", noop)

    @pytest.mark.parametrize(
        "rest",
        [(), ("Help",), ("META", "Help", noop, "extra")],
    )
    def test_wrong_arity_raises_type_error(self, rest):
        with pytest.raises(TypeError):
            Flags().add("name", "n", *rest)


class TestDone:
    """Test suite for freezing the registry."""

    def _flags(self):
        return (
            Flags()
            .add("verbose", "v", "Verbose", noop)
            .add("output", "o", "FILE", "Output", lambda text: None)
            .add("retries", LONG_ONLY, "N", "Retries", lambda text: None)
            .add("dry-run", LONG_ONLY, "Dry run", noop)
        )

    def test_done_returns_registry_and_freezes(self):
        flags = self._flags()
        assert flags.frozen is False
        assert flags.done() is flags
        assert flags.frozen is True

    def test_short_option_string(self):
        assert self._flags().done().short_options == "vo:"

    def test_long_option_table(self):
        assert self._flags().done().long_options == (
            LongOption("verbose", False, ord("v")),
            LongOption("output", True, ord("o")),
            LongOption("retries", True, -2),
            LongOption("dry-run", False, -3),
        )

    def test_done_is_idempotent(self):
        flags = self._flags().done()
        table = flags.long_options
        assert flags.done() is flags
        assert flags.long_options is table

    def test_add_after_done_raises(self):
        flags = self._flags().done()
        with pytest.raises(FlagsFrozenError):
            flags.add("late", "l", "Too late", noop)
        assert len(flags.descriptors) == 4

    def test_add_after_parse_raises(self):
        flags = self._flags()
        flags.parse([])
        assert flags.frozen is True
        with pytest.raises(FlagsFrozenError):
            flags.add("late", LONG_ONLY, "Too late", noop)

    def test_frozen_error_is_runtime_error(self):
        assert issubclass(FlagsFrozenError, RuntimeError)
