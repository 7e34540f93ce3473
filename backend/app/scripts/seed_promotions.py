"""
Seed-скрипт: загрузка акций из JSON-файла для локального запуска
Запуск: python -m app.scripts.seed_promotions path/to/promotions.json
"""
import json
import sys
from sqlmodel import SQLModel, Session
from app.db.session import engine
from app.models.promotion import PromotionRecord


def create_tables():
    """Создание всех таблиц"""
    SQLModel.metadata.create_all(engine)


def record_from_payload(item: dict) -> PromotionRecord:
    """camelCase-запись (как в API мерчанта) -> строка таблицы"""
    config = item.get("config") or {}
    return PromotionRecord(
        id=str(item["id"]),
        merchant_id=str(item["merchantId"]),
        name=item["name"],
        description=item.get("description"),
        type=item.get("type") or config.get("kind", ""),
        start_at=item["startAt"],
        end_at=item["endAt"],
        channels=list(item.get("channels") or []),
        scope=item.get("scope") or {},
        promotion_config=config,
        expose_to_creators=bool(item.get("exposeToCreators", False)),
        allowed_creator_ids=item.get("allowedCreatorIds"),
        human_readable_rule=item.get("humanReadableRule", ""),
    )


def seed_promotions(path: str):
    """Вставить или обновить акции из файла"""
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    items = payload.get("promotions", []) if isinstance(payload, dict) else payload

    with Session(engine) as session:
        for item in items:
            record = record_from_payload(item)
            session.merge(record)
            print(f"Promotion upserted: {record.id} ({record.merchant_id})")
        session.commit()


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m app.scripts.seed_promotions <promotions.json>")
        sys.exit(1)
    print("Creating tables...")
    create_tables()
    print("Seeding promotions...")
    seed_promotions(sys.argv[1])
    print("Done!")


if __name__ == "__main__":
    main()
