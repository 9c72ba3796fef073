"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path

import dirinv.core.theme as theme_module
import pytest
from dirinv.core.paths import get_theme_path
from dirinv.core.theme import (
    ThemeColors,
    _read_overrides,
    get_rich_theme,
    get_theme,
    load_theme,
)
from rich.theme import Theme


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """Defaults use red text, cyan directories and green info lines."""
        colors = ThemeColors()
        assert colors.text == "#ff4040"
        assert colors.directory == "#00ffff"
        assert colors.info == "#00ff00"

    def test_valid_hex_colors(self) -> None:
        """ThemeColors accepts valid hex color codes."""
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        """ThemeColors rejects colors without # prefix."""
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        """ThemeColors rejects colors with wrong length."""
        with pytest.raises(ValueError, match="must be #RGB or #RRGGBB"):
            ThemeColors(directory="#ff")

    def test_invalid_hex_chars(self) -> None:
        """ThemeColors rejects invalid hex characters."""
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(symlink="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        """ThemeColors rejects unknown fields."""
        with pytest.raises(ValueError):
            ThemeColors(unknown_field="#ffffff")  # type: ignore[call-arg]


class TestReadOverrides:
    """Tests for _read_overrides internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        """Loads colors from valid TOML file."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "#000000"\ndirectory = "#aabbcc"\n')

        result = _read_overrides(theme_file)

        assert result == {"text": "#000000", "directory": "#aabbcc"}

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file yields no overrides."""
        assert _read_overrides(tmp_path / "nonexistent.toml") == {}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Malformed TOML yields no overrides."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _read_overrides(theme_file) == {}

    def test_non_table_colors(self, tmp_path: Path) -> None:
        """A 'colors' key that is not a table is rejected."""
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('colors = "red"\n')

        assert _read_overrides(theme_file) == {}


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_defaults_without_user_file(self) -> None:
        """No user theme means default colors."""
        assert load_theme() == ThemeColors()

    def test_user_theme_from_config_dir(self) -> None:
        """The theme file in the config directory overrides defaults."""
        path = get_theme_path()
        path.parent.mkdir(parents=True)
        path.write_text('[colors]\ndirectory = "#0000ff"\n')

        colors = load_theme()

        assert colors.directory == "#0000ff"
        assert colors.text == "#ff4040"

    def test_invalid_user_colors_fall_back(self, tmp_path: Path) -> None:
        """Invalid overrides fall back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\ntext = "red"\n')

        assert load_theme(user_theme) == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_returns_rich_theme(self) -> None:
        """Returns a Rich Theme instance."""
        assert isinstance(get_rich_theme(ThemeColors()), Theme)

    def test_includes_listing_styles(self) -> None:
        """Theme includes the styles used by entry tables."""
        theme = get_rich_theme(ThemeColors())

        for name in ("text", "header", "border", "directory", "symlink", "special", "info"):
            assert name in theme.styles
        assert "bold_header" in theme.styles

    def test_directory_style_is_bold(self) -> None:
        """Directory names are rendered bold in their color."""
        theme = get_rich_theme(ThemeColors(directory="#123456"))

        assert theme.styles["directory"].bold is True
        assert theme.styles["directory"].color is not None


class TestGetTheme:
    """Tests for get_theme caching function."""

    def test_caches_theme(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """get_theme returns cached instance on subsequent calls."""
        monkeypatch.setattr(theme_module, "_cached_theme", None)

        theme1 = get_theme()
        theme2 = get_theme()

        assert theme1 is theme2
