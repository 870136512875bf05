# scripts/seed_amenities.py

import asyncio
import logging

import typer

from app.core.config import settings
from app.core.database import AsyncSessionLocal, create_db_and_tables
from app.domains import models as domain_models  # noqa: F401
from app.domains.shared.services import seed_amenities

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

cli = typer.Typer()


@cli.command()
def main(
    create_tables: bool = typer.Option(
        False, '--create-tables',
        help="편의시설을 추가하기 전에 테이블을 생성합니다. (개발 환경 전용)"
    ),
):
    """
    미리 정의된 편의시설(버스/시설/서비스 유형)을 shared.amenities 에 추가합니다.
    이미 같은 이름의 편의시설이 있으면 건너뜁니다.
    """
    async def run_seeding() -> int:
        if create_tables:
            await create_db_and_tables()
        async with AsyncSessionLocal() as db:
            return await seed_amenities(db)

    created = asyncio.run(run_seeding())
    typer.echo(f"편의시설 {created}건을 추가했습니다.")


if __name__ == "__main__":
    cli()
