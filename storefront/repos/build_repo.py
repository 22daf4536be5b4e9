from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.build import PCBuildModel


class BuildRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_short_id(self, short_id: str) -> PCBuildModel | None:
        return self.db.execute(
            select(PCBuildModel).where(PCBuildModel.short_id == short_id)
        ).scalar_one_or_none()

    def latest_private(self, user_id: int) -> PCBuildModel | None:
        stmt = (
            select(PCBuildModel)
            .where(PCBuildModel.user_id == user_id, PCBuildModel.is_public.is_(False))
            .order_by(PCBuildModel.updated_at.desc(), PCBuildModel.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_private(self, user_id: int) -> list[PCBuildModel]:
        stmt = (
            select(PCBuildModel)
            .where(PCBuildModel.user_id == user_id, PCBuildModel.is_public.is_(False))
            .order_by(PCBuildModel.created_at.desc(), PCBuildModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create(self, build: PCBuildModel) -> PCBuildModel:
        self.db.add(build)
        self.db.commit()
        self.db.refresh(build)
        return build

    def delete(self, build: PCBuildModel) -> None:
        self.db.delete(build)
        self.db.commit()
