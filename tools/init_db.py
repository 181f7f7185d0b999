from mealplan_core.config import get_settings
from mealplan_core.db.database import get_db_engine, init_db


def main():
    engine = get_db_engine(echo=False)
    init_db(engine)
    print(f"✅ DB creada/verificada usando DATABASE_URL ({get_settings().database_url}).")


if __name__ == "__main__":
    main()
