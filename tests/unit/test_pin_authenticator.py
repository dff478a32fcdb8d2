"""
Unit tests for PinAuthenticator
"""

import pytest

from remote_bridge.auth.pin_authenticator import PinAuthenticator


class TestPinAuthenticator:
    """Test cases for PIN generation and validation"""

    def setup_method(self):
        """Set up test fixtures"""
        self.auth = PinAuthenticator()

    def test_no_pin_before_start(self):
        """Test that nothing validates before the first regenerate"""
        assert self.auth.pin is None
        assert not self.auth.validate("0000")
        assert not self.auth.validate(None)

    def test_pin_format(self):
        """Test that PINs are four digits, leading zeros kept"""
        for _ in range(500):
            pin = self.auth.regenerate()
            assert len(pin) == 4
            assert pin.isdigit()

    def test_leading_zero_pins_occur(self):
        pins = {self.auth.regenerate() for _ in range(5000)}
        assert any(pin.startswith("0") for pin in pins)

    def test_custom_length(self):
        auth = PinAuthenticator(length=6)
        assert len(auth.regenerate()) == 6

    def test_invalid_length(self):
        with pytest.raises(ValueError):
            PinAuthenticator(length=0)

    def test_validate_exact_match_only(self):
        """Test that only the exact current PIN string validates"""
        pin = self.auth.regenerate()

        assert self.auth.validate(pin)
        assert not self.auth.validate(pin + "0")
        assert not self.auth.validate(pin[:-1])
        assert not self.auth.validate(" " + pin)
        assert not self.auth.validate("")
        assert not self.auth.validate(None)
        assert not self.auth.validate(int(pin))

    def test_old_pin_rejected_after_regenerate(self):
        """Test that regenerating invalidates the previous PIN"""
        first = self.auth.regenerate()
        second = self.auth.regenerate()
        while second == first:
            second = self.auth.regenerate()

        assert not self.auth.validate(first)
        assert self.auth.validate(second)

    def test_consecutive_pins_are_mostly_distinct(self):
        """Test that consecutive starts almost never repeat the PIN"""
        previous = self.auth.regenerate()
        repeats = 0
        samples = 2000

        for _ in range(samples):
            current = self.auth.regenerate()
            if current == previous:
                repeats += 1
            previous = current

        # Expected repeat rate is 1/10000
        assert repeats < samples * 0.01

    def test_reset(self):
        pin = self.auth.regenerate()
        self.auth.reset()
        assert self.auth.pin is None
        assert not self.auth.validate(pin)


if __name__ == "__main__":
    pytest.main([__file__])
