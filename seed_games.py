"""
Seed idempotente de los juegos.

- Set "corinthians-2005-brasileirao" (Adivinhe o Elenco), solo si no existe.
- Time Corinthians con un plantel mínimo para el Jogador do Dia (solo si no existe).

Uso: python seed_games.py
"""
import logging
import sys

from db import database, models
from utils.name_matching import normalize_for_match

logger = logging.getLogger("seed_games")

SET_SLUG = "corinthians-2005-brasileirao"

CORINTHIANS_2005 = [
    (1, "Fábio Costa"), (2, "Edson Sitta"), (3, "Anderson"), (4, "Gustavo Nery"),
    (5, "Marcelo Mattos"), (6, "Sebá"), (7, "Roger"), (8, "Rosinei"), (9, "Nilmar"),
    (10, "Tévez"), (11, "Gil"), (12, "Tiago"), (13, "Marinho"), (14, "Coelho"),
    (15, "Wendel"), (16, "Betão"), (17, "Dinélson"), (18, "Bobô"), (19, "Carlos Alberto"),
    (20, "Élton"), (21, "Hugo"), (22, "Júlio César"), (23, "Marquinhos Silva"),
    (24, "Marcus Vinicius"), (26, "Fininho"), (27, "Bruno Octávio"), (29, "Fabrício"),
    (30, "Jô"), (32, "Wilson"), (33, "Ronny"), (34, "Ji-Paraná"), (35, "Abuda"),
    (37, "Nilton"), (40, "Marcelo"), (41, "Wescley"), (42, "Eduardo Ratinho"),
    (43, "Mascherano"),
]

ALIASES = {"Tévez": ["Carlitos Tevez", "Carlos Tevez"]}

# (nombre, apodo, posición, número)
CORINTHIANS_SQUAD = [
    ("Cássio Ramos", "Cássio", "GK", 12),
    ("Fágner Conserva Lemos", "Fágner", "RB", 23),
    ("Félix Torres", None, "CB", 3),
    ("Rodrigo Garro", "Garro", "AM", 10),
    ("Memphis Depay", "Memphis", "ST", 94),
    ("Yuri Alberto Monteiro da Silva", "Yuri Alberto", "ST", 9),
]


def seed_roster_set(db) -> models.GameSet:
    game_set = db.query(models.GameSet).filter(models.GameSet.slug == SET_SLUG).first()
    if game_set:
        # El elenco de un set no cambia una vez publicado
        logger.info(f"Set {SET_SLUG} ya existía, sin cambios")
        return game_set

    game_set = models.GameSet(
        slug=SET_SLUG,
        title="Corinthians - Brasileirão 2005 (Campeão)",
        season=2005,
        competition="Campeonato Brasileiro",
        club_name="Corinthians",
        extra={"coach": "Antônio Lopes", "source": "seed"},
    )
    db.add(game_set)
    logger.info(f"Set {SET_SLUG} creado")

    for order, (number, name) in enumerate(CORINTHIANS_2005, start=1):
        game_set.players.append(models.GameSetPlayer(
            jersey_number=number,
            display_name=name,
            normalized_name=normalize_for_match(name),
            aliases=ALIASES.get(name),
            sort_order=order,
        ))
    return game_set


def seed_daily_team(db) -> models.Team:
    team = db.query(models.Team).filter(models.Team.slug == "corinthians").first()
    if team:
        return team

    team = models.Team(name="Corinthians", slug="corinthians")
    db.add(team)
    db.flush()
    for name, known_name, position, number in CORINTHIANS_SQUAD:
        db.add(models.Player(
            team_id=team.id,
            name=name,
            known_name=known_name,
            position=position,
            shirt_number=number,
        ))
    logger.info(f"Time corinthians creado con {len(CORINTHIANS_SQUAD)} jugadores")
    return team


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    database.Base.metadata.create_all(bind=database.engine)
    db = database.SessionLocal()
    try:
        with database.unit_of_work(db):
            seed_roster_set(db)
            seed_daily_team(db)
    except Exception:
        logger.exception("Seed failed")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
