"""Shared fixtures for intake tests."""

import asyncio

import pytest


class FakeGenerator:
    """In-memory text generator that records every request."""

    def __init__(self, response="", error=None, delay=0.0):
        self.response = response
        self.error = error
        self.delay = delay
        self.calls = []

    async def generate(self, prompt, model=None, max_tokens=1024, validate=None):
        self.calls.append({"prompt": prompt, "model": model, "max_tokens": max_tokens, "validate": validate})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_generator():
    return FakeGenerator


EVENT_TABLE = """# Dokumentation eines Vorfalls

| Feld | Bezeichnung | Wert |
|------|-------------|------|
| 101 | Datensatznummer | ERG-2023-014 |
| 102 | Ereignistitel | Räumung eines Protestcamps |
| 111 | Land | Deutschland |
| 112 | Region | Niedersachsen |
| 113 | Anfangsdatum | 2023-03-02 |
"""

ACT_TABLE = """| Feld | Bezeichnung | Wert |
| 501 | Akt-Datensatznummer | AKT-77 |
| 502 | Opfername | Unbekannt |
| 504 | Datum | 2022-10-27 |
| 507 | Ort | Hannover |
"""

PARTICIPATION_DOCUMENT = """HURIDOCS Beteiligungsformat

| Feld | Bezeichnung | Wert |
| 2401 | Beteiligung-Datensatznummer | BET-2031 |
| 2402 | Name der Person | Polizeidirektion Nord |
| 2409 | Grad der Beteiligung | Beihilfe |
"""


@pytest.fixture
def event_table():
    return EVENT_TABLE


@pytest.fixture
def act_table():
    return ACT_TABLE


@pytest.fixture
def participation_document():
    return PARTICIPATION_DOCUMENT
