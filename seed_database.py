"""Script to seed the database with sample tractors, comments and issues"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from config import settings
from config.database import get_sync_database_url
from core.deps import SYSTEM_USER_ID
from db_base import Base
from db_models.tractor import Tractor, TractorStatus
from db_models.tractor_comment import TractorComment
from db_models.tractor_issue import TractorIssue


# truck_number, plant, operator, status, days since service, cleanliness
SAMPLE_TRACTORS = [
    ("T-101", "P01", "op-001", TractorStatus.ACTIVE, 5, 4),
    ("T-102", "P01", None, TractorStatus.SPARE, 45, 3),
    ("T-103", "P02", "op-002", TractorStatus.ACTIVE, 12, 5),
    ("T-104", "P02", None, TractorStatus.IN_SHOP, 90, 2),
    ("T-105", "P03", None, TractorStatus.RETIRED, None, 1),
]


def seed_tractors():
    engine = create_engine(get_sync_database_url(settings.DATABASE_URL))
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    now = datetime.now(timezone.utc)

    with Session() as session:
        existing = session.scalar(select(func.count(Tractor.id))) or 0
        if existing:
            print(f"Database already has {existing} tractors, skipping seed")
            return

        for number, plant, operator, status, service_days, rating in SAMPLE_TRACTORS:
            tractor = Tractor(
                truck_number=number,
                assigned_plant=plant,
                assigned_operator=operator,
                status=status.value,
                last_service_date=now - timedelta(days=service_days) if service_days is not None else None,
                cleanliness_rating=rating,
                make="Mack",
                model="Granite",
                year=2019,
                created_at=now,
                updated_at=now,
                updated_by=SYSTEM_USER_ID,
            )
            session.add(tractor)
            session.flush()
            print(f"  Added: {tractor.truck_number} ({tractor.status})")

            if status is TractorStatus.IN_SHOP:
                session.add(TractorIssue(
                    tractor_id=tractor.id,
                    description="Air brake leak on rear axle",
                    severity="High",
                    time_created=now,
                ))
            session.add(TractorComment(
                tractor_id=tractor.id,
                text=f"Seeded record for {number}",
                author="seed",
                created_at=now,
            ))

        session.commit()
        total = session.scalar(select(func.count(Tractor.id)))
        print(f"\n[OK] Total tractors in database: {total}")

    engine.dispose()


if __name__ == "__main__":
    print("=" * 60)
    print("DATABASE SEEDING SCRIPT")
    print("=" * 60)
    seed_tractors()
