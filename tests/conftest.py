import textwrap
from pathlib import Path

import pytest

from minilink.config.context import ConfigContext


def write(p: Path, text: str) -> Path:
    """
    Записывает текст в файл, создавая родительские директории при необходимости.

    newline="", чтобы тесты контролировали переводы строк побайтно.
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8", newline="") as f:
        f.write(text)
    return p


@pytest.fixture
def write_file():
    """Хелпер записи файлов для тестов с tmp_path."""
    return write


@pytest.fixture
def features_ctx() -> ConfigContext:
    """Типичный контекст сборки: набор фич и скалярные атрибуты цели."""
    return ConfigContext.from_mapping({
        "feature": ["alloc", "defmt"],
        "target_arch": "arm",
        "target_os": "none",
        "panic": "abort",
    })


@pytest.fixture
def empty_features_ctx() -> ConfigContext:
    """Контекст без включённых фич."""
    return ConfigContext.from_mapping({"feature": []})


@pytest.fixture
def linker_template() -> str:
    """Шаблон скрипта компоновщика с отступами и директивами на своих строках."""
    return textwrap.dedent("""\
        SECTIONS {
        \t{% if contains(cfg.feature, "alloc") %}
        \t.heap : {
        \t\t__heap_start = .;
        \t}
        \t{% else %}
        \t.test : {
        \t\t__test = .;
        \t}
        \t{% endif %}
        }""")


@pytest.fixture(autouse=True)
def _clean_cargo_env(monkeypatch):
    # Тесты не должны зависеть от окружения cargo, в котором их запустили
    import os
    for name in list(os.environ):
        if name.startswith("CARGO_CFG_") or name in ("OUT_DIR", "CARGO_PKG_NAME"):
            monkeypatch.delenv(name, raising=False)
