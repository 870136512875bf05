# pgsql_scripts/triggers.py
from alembic_utils.pg_trigger import PGTrigger
from . import functions as pg_func

db_schema = pg_func.refresh_seat_diagram_total_seats_func.schema
db_func = pg_func.refresh_seat_diagram_total_seats_func.signature
trg_after_change_bus_seats = PGTrigger(
    schema="fleet",
    signature="after_change_bus_seats",
    on_entity="fleet.bus_seats",  # 이 트리거가 적용될 테이블
    is_constraint=False,
    definition=f"""
    AFTER INSERT OR UPDATE OR DELETE
    ON fleet.bus_seats
    FOR EACH ROW
    EXECUTE FUNCTION {db_schema}.{db_func}
    """
)

db_schema = pg_func.refresh_bus_diagram_model_total_seats_func.schema
db_func = pg_func.refresh_bus_diagram_model_total_seats_func.signature
trg_after_change_bus_seat_models = PGTrigger(
    schema="fleet",
    signature="after_change_bus_seat_models",
    on_entity="fleet.bus_seat_models",
    is_constraint=False,
    definition=f"""
    AFTER INSERT OR UPDATE OR DELETE
    ON fleet.bus_seat_models
    FOR EACH ROW
    EXECUTE FUNCTION {db_schema}.{db_func}
    """
)
