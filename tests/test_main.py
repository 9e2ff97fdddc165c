"""Tests for the command line modes."""

from unittest.mock import patch

import pytest

from spacetraveling.main import run_browse, run_build, run_read
from spacetraveling.prismic.mock_client import MockPrismicClient
from spacetraveling.utils.config import Settings


@pytest.fixture
def settings():
    return Settings(posts_page_size=1, date_locale="en_US")


class TestCliModes:
    @pytest.mark.asyncio
    async def test_browse_loads_until_exhausted(self, settings, capsys):
        with patch("builtins.input", side_effect=["", ""]) as prompt:
            code = await run_browse(MockPrismicClient(), settings)

        out = capsys.readouterr().out
        assert code == 0
        assert prompt.call_count == 2
        assert out.index("Como utilizar Hooks") < out.index("Criando um app CRA do zero")
        assert out.index("Criando um app CRA do zero") < out.index("Rascunho sem data")
        assert "Não publicado" in out
        assert "3 post(s)." in out

    @pytest.mark.asyncio
    async def test_browse_quit(self, settings, capsys):
        with patch("builtins.input", return_value="q"):
            await run_browse(MockPrismicClient(), settings)

        assert "1 post(s)." in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_read(self, settings, capsys):
        code = await run_read(MockPrismicClient(), settings, "como-utilizar-hooks")

        out = capsys.readouterr().out
        assert code == 0
        assert "25 Mar 2021 · Joseph Oliveira · 0 min" in out
        assert "## Proin et varius" in out

    @pytest.mark.asyncio
    async def test_read_unknown_slug(self, settings):
        assert await run_read(MockPrismicClient(), settings, "missing") == 1

    @pytest.mark.asyncio
    async def test_build(self, settings, tmp_path, capsys):
        code = await run_build(MockPrismicClient(), settings, tmp_path)

        assert code == 0
        assert "4 page(s) written" in capsys.readouterr().out
