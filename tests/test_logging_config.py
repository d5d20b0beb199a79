import pytest

from procforge.errors import GenreLookupError, ProcForgeError, ValidationError
from procforge.logging_config import configure_logging, get_logger


@pytest.fixture
def restore_logging():
    yield
    configure_logging("WARNING")


class TestConfigureLogging:
    """structlog setup."""

    def test_unknown_level(self):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError, match="Unknown log level 'LOUD'"):
            configure_logging("LOUD")

    def test_json_output(self, restore_logging, capsys):
        """JSON mode renders one object per event."""
        configure_logging("info", json=True)
        get_logger("procforge.test").bind(generator="item").info("generation complete", count=3)
        out = capsys.readouterr().out
        assert '"event": "generation complete"' in out
        assert '"generator": "item"' in out

    def test_level_filters(self, restore_logging, capsys):
        """Events below the configured level are dropped."""
        configure_logging("ERROR")
        get_logger("procforge.test").warning("dropped")
        assert "dropped" not in capsys.readouterr().out


class TestErrors:
    """Error hierarchy."""

    def test_lookup_errors_are_lookup_errors(self):
        """Genre lookups can be caught as LookupError."""
        assert isinstance(GenreLookupError("x"), LookupError)
        assert isinstance(GenreLookupError("x"), ProcForgeError)

    def test_validation_message(self):
        """Validation messages carry index and name when given."""
        assert str(ValidationError("bad", index=2, name="Axe")) == "#2 (Axe): bad"
        assert str(ValidationError("bad", index=2)) == "#2: bad"
        assert str(ValidationError("bad")) == "bad"
