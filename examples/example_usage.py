"""Exemple : utiliser la couche service sans passer par Flask.

Affiche le tableau de bord et exporte l'historique du mois en CSV.
"""

import importlib
from pathlib import Path

from config import get_settings_module

from src.visitor_registry.visitor_registry.container import build_container
from src.visitor_registry.visitor_registry.core.enums import Role
from src.visitor_registry.visitor_registry.reports.service import parse_history_criteria
from src.visitor_registry.visitor_registry.users.model import User


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    # reports only need the role of the caller
    viewer = User(user_id=0, name="script", email="script@localhost", password_hash="", role=Role.AGENT)
    print(container.statistics_service.summary(viewer))

    criteria = parse_history_criteria({"start_date": "2024-01-01"})
    visitors = container.statistics_service.history(viewer, criteria)
    Path("visiteurs.csv").write_bytes(container.export_service.to_csv(visitors))
    print(f"{len(visitors)} visiteur(s) exporté(s) vers visiteurs.csv")


if __name__ == "__main__":
    main()
