from sqlalchemy.pool import StaticPool

from booking_engine.database import create_db_engine


def test_in_memory_sqlite_shares_one_connection_with_foreign_keys():
    engine = create_db_engine("sqlite://")
    try:
        assert isinstance(engine.pool, StaticPool)
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    finally:
        engine.dispose()


def test_file_sqlite_uses_a_regular_pool(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'bookings.db'}")
    try:
        assert not isinstance(engine.pool, StaticPool)
        with engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
    finally:
        engine.dispose()
