"""Milestone repository - Database operations for milestones and their progress log"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Milestone, MilestoneProgress


class MilestoneRepository:
    """Repository for milestone database operations"""

    @staticmethod
    def get_by_id(db: Session, milestone_id: int) -> Optional[Milestone]:
        """Milestone with its contract, payments and progress log"""
        return (
            db.query(Milestone)
            .options(
                joinedload(Milestone.contract),
                selectinload(Milestone.payments),
                selectinload(Milestone.progress_updates).joinedload(MilestoneProgress.user),
            )
            .filter(Milestone.id == milestone_id)
            .first()
        )

    @staticmethod
    def add_progress(
        db: Session, milestone: Milestone, user_id: int, description: str, status: str
    ) -> MilestoneProgress:
        """Stage a progress entry (no commit)"""
        progress = MilestoneProgress(
            milestone_id=milestone.id,
            user_id=user_id,
            description=description,
            status=status,
        )
        db.add(progress)
        return progress

    @staticmethod
    def get_progress(db: Session, milestone_id: int) -> list[MilestoneProgress]:
        return (
            db.query(MilestoneProgress)
            .options(joinedload(MilestoneProgress.user))
            .filter(MilestoneProgress.milestone_id == milestone_id)
            .order_by(MilestoneProgress.created_at.desc(), MilestoneProgress.id.desc())
            .all()
        )

    @staticmethod
    def update(db: Session, milestone: Milestone, **updates) -> Milestone:
        for key, value in updates.items():
            if hasattr(milestone, key):
                setattr(milestone, key, value)
        db.commit()
        db.refresh(milestone)
        return milestone
