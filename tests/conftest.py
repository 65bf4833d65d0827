"""Shared fixtures for romdat tests."""

import logging

import pytest

from romdat.core.string_table import StringTable


def md5(n: int) -> str:
    """A 32-character identity key for section n."""
    return f"{n:032X}"


def section(key: str, crc: str = "00000000 00000001", **keys) -> str:
    """Render a catalogue section; keyword order is preserved after CRC."""
    lines = [f"[{key}]"]
    if "GoodName" in keys:
        lines.append(f"GoodName={keys.pop('GoodName')}")
    lines.append(f"CRC={crc}")
    lines.extend(f"{k}={v}" for k, v in keys.items())
    return "\n".join(lines) + "\n\n"


GOLDENEYE_CHEAT = "8004_64D2_0000 8004_6F2C_0000"

SAMPLE_CATALOGUE = f"""; Mupen64Plus ROM catalogue (excerpt)

[{md5(1)}]
GoodName=Super Mario 64 (U)
CRC=635A2BFF 8B022326
SaveType=Eeprom 4KB
Players=1

[{md5(2)}]
GoodName=Super Mario 64 (U) [b1]
CRC=635A2BFF 8B022326
RefMD5={md5(1)}

[{md5(3)}]
GoodName=Super Mario 64 (U) [h1]
CRC=11111111 22222222
RefMD5={md5(1)}

[{md5(4)}]
GoodName=GoldenEye 007 (U)
CRC=DCBC50D1 09FD1AA3
SaveType=Eeprom 4KB
Status=4
Cheat0={GOLDENEYE_CHEAT}

[{md5(5)}]
GoodName=GoldenEye 007 (E)
CRC=0414CA61 2E57B8AA
SaveType=Eeprom 4KB
Status=4
Cheat0={GOLDENEYE_CHEAT}

[{md5(6)}]
GoodName=Orphaned Hack
CRC=99999999 99999999
RefMD5={md5(255)}

[{md5(7)}]
GoodName=Tetris 64 (J)
CRC=04A80E23 4F8F2FC4
Mempak=No
SiDmaDuration=1
"""

# Final record order of SAMPLE_CATALOGUE after conversion
SAMPLE_ORDER = [md5(5), md5(7), md5(3), md5(1), md5(4)]


@pytest.fixture(autouse=True)
def reset_romdat_logger():
    """Undo setup_logging so caplog keeps seeing romdat records."""
    yield
    logger = logging.getLogger("romdat")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def sample_catalogue():
    """A small catalogue exercising duplicates, references and cheats."""
    return SAMPLE_CATALOGUE


@pytest.fixture
def string_table():
    """Provide an empty string table."""
    return StringTable()


@pytest.fixture
def catalogue_file(tmp_path, sample_catalogue):
    """Write the sample catalogue to disk."""
    path = tmp_path / "mupen64plus.ini"
    path.write_text(sample_catalogue, encoding="utf-8")
    return path
