# pgsql_scripts/functions.py
from alembic_utils.pg_function import PGFunction

refresh_seat_diagram_total_seats_func = PGFunction(
    schema="fleet",  # 스키마 이름
    signature="refresh_seat_diagram_total_seats()",  # 함수 시그니처
    definition="""
    -- 좌석(bus_seats)이 바뀔 때 좌석 배치도의 활성 좌석 수를 다시 계산합니다.
    RETURNS TRIGGER AS $$
    DECLARE
        target_id INT;
    BEGIN
        IF TG_OP = 'DELETE' THEN
            target_id := OLD.seat_diagram_id;
        ELSE
            target_id := NEW.seat_diagram_id;
        END IF;

        UPDATE fleet.seat_diagrams
        SET total_seats = (
            SELECT count(*)
            FROM fleet.bus_seats
            WHERE seat_diagram_id = target_id
              AND active = TRUE
              AND space_type = 'SEAT'
        )
        WHERE id = target_id;

        RETURN NULL;
    END;
    $$ LANGUAGE plpgsql;
    """
)

refresh_bus_diagram_model_total_seats_func = PGFunction(
    schema="fleet",
    signature="refresh_bus_diagram_model_total_seats()",
    definition="""
    -- 템플릿 좌석(bus_seat_models)이 바뀔 때 좌석 배치 모델의 활성 좌석 수를 다시 계산합니다.
    RETURNS TRIGGER AS $$
    DECLARE
        target_id INT;
    BEGIN
        IF TG_OP = 'DELETE' THEN
            target_id := OLD.bus_diagram_model_id;
        ELSE
            target_id := NEW.bus_diagram_model_id;
        END IF;

        UPDATE fleet.bus_diagram_models
        SET total_seats = (
            SELECT count(*)
            FROM fleet.bus_seat_models
            WHERE bus_diagram_model_id = target_id
              AND active = TRUE
              AND space_type = 'SEAT'
        )
        WHERE id = target_id;

        RETURN NULL;
    END;
    $$ LANGUAGE plpgsql;
    """
)
