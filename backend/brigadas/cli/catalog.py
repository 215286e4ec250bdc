"""CLI utilities for the equipment catalog."""

# purpose: let administrators seed and inspect the reference equipment list
# status: active
# depends_on: brigadas.database, brigadas.stores.EquipmentStore

from __future__ import annotations

from typing import List

import typer

from ..database import SessionLocal
from ..stores import EquipmentStore

app = typer.Typer(help="Equipment catalog maintenance commands")

DEFAULT_CATALOG = (
    "GPS",
    "Brújula",
    "Clinómetro",
    "Hipsómetro",
    "Cinta diamétrica",
    "Cinta métrica",
    "Prensa botánica",
    "Tijeras de podar",
    "Machete",
    "Botiquín",
)


def _store() -> EquipmentStore:
    return EquipmentStore(SessionLocal)


@app.command()
def seed() -> None:
    """Insert the default catalog entries that are not present yet."""

    added = _store().add_catalog_items(DEFAULT_CATALOG)
    typer.echo(f"{added} equipos agregados al catálogo")


@app.command()
def add(names: List[str] = typer.Argument(..., help="Equipment type names")) -> None:
    """Add one or more equipment types to the catalog."""

    added = _store().add_catalog_items(names)
    typer.echo(f"{added} equipos agregados al catálogo")


@app.command("list")
def list_catalog() -> None:
    for name in sorted(_store().list_catalog()):
        typer.echo(name)


if __name__ == "__main__":  # pragma: no cover
    app()
