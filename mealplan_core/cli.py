"""
mealplan_core.cli
=================

Punto de entrada mínimo para generar un plan desde un catálogo JSON:

    mealplan-core generate catalogo.json --seed 42 --today 2026-08-01

Formato del catálogo
--------------------
{
  "user_id": "demo",                      (opcional)
  "preferences": {...},                   (opcional, ver UserPreferences.from_dict)
  "recipes": [{"id": "...", "course_type": "main_course", ...}, ...]
}

Con `--state` el estado de rotación se lee de ese archivo (si existe) y se
vuelve a escribir al terminar, así corridas sucesivas continúan la rotación.

Pensado para demo local y smoke tests manuales.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .config import get_settings
from .domain_models import MultiWeekBatch, Recipe, UserPreferences
from .engine import MealPlanEngine
from .errors import InvalidCatalog, MealPlanningError
from .rotation import RotationState
from .stores import InMemoryMealPlanStore

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mealplan-core")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Genera un lote de semanas desde un catálogo JSON")
    gen.add_argument("catalog", type=Path, help="Archivo JSON con recetas favoritas y preferencias")
    gen.add_argument("--user", default=None, help="Id de usuario (default: el del catálogo o 'cli')")
    gen.add_argument("--seed", type=int, default=None, help="Semilla para un resultado reproducible")
    gen.add_argument("--today", type=date.fromisoformat, default=None, help="Fecha de referencia YYYY-MM-DD")
    gen.add_argument("--state", type=Path, default=None, help="Archivo JSON del estado de rotación")
    gen.add_argument("--json", action="store_true", help="Imprimir el lote como JSON")
    return parser


def load_catalog(path: Path) -> Dict:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"recipes": data}
    return data


def read_catalog(path: Path) -> Tuple[Dict, List[Recipe], UserPreferences]:
    """
    Lee el catálogo y parsea recetas y preferencias.

    Raises:
        InvalidCatalog: archivo ilegible, JSON mal formado o una entrada que
            no se puede convertir (indica el índice de la receta).
    """
    source = str(path)
    try:
        catalog = load_catalog(path)
    except (OSError, ValueError) as e:
        raise InvalidCatalog(source, str(e)) from e
    if not isinstance(catalog, dict):
        raise InvalidCatalog(source, "se esperaba una lista de recetas o un objeto JSON")

    recipes: List[Recipe] = []
    for index, entry in enumerate(catalog.get("recipes") or []):
        try:
            recipes.append(Recipe.from_dict(entry))
        except KeyError as e:
            raise InvalidCatalog(source, f"falta el campo {e}", entry=index) from e
        except (AttributeError, TypeError, ValueError) as e:
            raise InvalidCatalog(source, str(e), entry=index) from e

    try:
        preferences = UserPreferences.from_dict(catalog.get("preferences") or {})
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidCatalog(source, f"preferencias: {e}") from e
    return catalog, recipes, preferences


def batch_to_dict(batch: MultiWeekBatch) -> Dict:
    return {
        "generation_batch_id": batch.generation_batch_id,
        "user_id": batch.user_id,
        "seed": batch.seed,
        "weeks": [w.to_dict() for w in batch.weeks],
        "carried_weeks": [w.to_dict() for w in batch.carried_weeks],
        "cycle_resets": [
            {
                "course_type": r.course_type.value,
                "old_cycle_number": r.old_cycle_number,
                "new_cycle_number": r.new_cycle_number,
                "favorite_count": r.favorite_count,
                "reset_on": r.reset_on.isoformat(),
            }
            for r in batch.cycle_resets
        ],
        "rotation_state": batch.rotation_state.to_dict(),
    }


def render_text(batch: MultiWeekBatch, recipes: Sequence[Recipe]) -> str:
    names = {r.id: r.name or r.id for r in recipes}
    lines: List[str] = [f"Lote {batch.generation_batch_id} (seed={batch.seed})"]
    for week in batch.weeks:
        lines.append("")
        lines.append(f"Semana {week.start_date.isoformat()} → {week.end_date.isoformat()}")
        for offset in range(7):
            day = week.start_date + timedelta(days=offset)
            lines.append(f"  {day.isoformat()}")
            for a in week.assignments_for(day):
                if a.is_empty:
                    label = "—"
                else:
                    label = names.get(a.recipe_id, a.recipe_id)
                    if a.accompaniment_recipe_id:
                        label = f"{label} + {names.get(a.accompaniment_recipe_id, a.accompaniment_recipe_id)}"
                lines.append(f"    {a.course_type.value:<12} {label}  ({a.reasoning})")
    for reset in batch.cycle_resets:
        lines.append(
            f"↻ ciclo {reset.course_type.value}: {reset.old_cycle_number} → {reset.new_cycle_number}"
        )
    return "\n".join(lines)


def _generate(args: argparse.Namespace) -> int:
    catalog, recipes, preferences = read_catalog(args.catalog)
    user_id = args.user or catalog.get("user_id") or "cli"

    store = InMemoryMealPlanStore()
    store.set_favorites(user_id, recipes)
    store.set_preferences(user_id, preferences)

    if args.state is not None and args.state.exists():
        state = RotationState.from_json(args.state.read_text(encoding="utf-8"), user_id=user_id)
        store.save(user_id, state)

    engine = MealPlanEngine(
        catalog=store,
        preferences=store,
        rotation_store=store,
        week_store=store,
        settings=get_settings(),
    )
    batch = engine.generate(user_id, today=args.today, seed=args.seed)

    if args.state is not None:
        args.state.parent.mkdir(parents=True, exist_ok=True)
        args.state.write_text(batch.rotation_state.to_json(), encoding="utf-8")

    if args.json:
        print(json.dumps(batch_to_dict(batch), ensure_ascii=False, indent=2))
    else:
        print(render_text(batch, recipes))
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Ejecuta la CLI.

    Returns
    -------
    int
        0 si se generó el plan; 1 ante un error del motor o un catálogo
        inválido (mensaje en stderr).
    """
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = _build_parser().parse_args(argv)
    try:
        return _generate(args)
    except MealPlanningError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
