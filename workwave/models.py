import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    FREELANCER = "FREELANCER"


class ProjectStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BidStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class ContractStage(str, enum.Enum):
    APPROVAL = "APPROVAL"
    PAYMENT = "PAYMENT"
    REVIEW = "REVIEW"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MilestoneStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PAYMENT_REQUESTED = "PAYMENT_REQUESTED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"


class NotificationType(str, enum.Enum):
    BID_RECEIVED = "BID_RECEIVED"
    BID_UPDATED = "BID_UPDATED"
    CONTRACT_CREATED = "CONTRACT_CREATED"
    CONTRACT_COMPLETED = "CONTRACT_COMPLETED"
    MILESTONE_UPDATED = "MILESTONE_UPDATED"
    MILESTONE_COMPLETED = "MILESTONE_COMPLETED"
    PAYMENT_REQUESTED = "PAYMENT_REQUESTED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"


class InvoiceStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # CLIENT, FREELANCER - fixed at registration
    bio = Column(Text, nullable=True)
    avatar = Column(String(500), nullable=True)
    # Stripe connected account receiving escrow releases (freelancers only)
    stripe_account_id = Column(String(255), nullable=True)
    average_rating = Column(Float, nullable=True)  # Recomputed on every new rating
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    projects = relationship("Project", back_populates="client")
    bids = relationship("Bid", back_populates="freelancer")
    notifications = relationship("Notification", back_populates="user")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    budget = Column(Float, nullable=False)
    deadline = Column(DateTime, nullable=True)
    skills = Column(JSON, default=list)
    category = Column(String(100), nullable=True)
    status = Column(String(20), default=ProjectStatus.OPEN.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("User", back_populates="projects")
    bids = relationship("Bid", back_populates="project", cascade="all, delete-orphan")
    contracts = relationship("Contract", back_populates="project")


class Bid(Base):
    __tablename__ = "bids"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    delivery_time = Column(Integer, nullable=False)  # Days
    cover_letter = Column(Text, nullable=False)
    status = Column(String(20), default=BidStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="bids")
    freelancer = relationship("User", back_populates="bids")
    contract = relationship("Contract", back_populates="bid", uselist=False)


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    bid_id = Column(Integer, ForeignKey("bids.id"), unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    terms = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    stage = Column(String(20), default=ContractStage.APPROVAL.value, nullable=False)
    terms_accepted = Column(Boolean, default=False, nullable=False)
    # Contract-level escrow hold created when the client funds the whole contract
    payment_intent_id = Column(String(255), nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    project = relationship("Project", back_populates="contracts")
    bid = relationship("Bid", back_populates="contract")
    client = relationship("User", foreign_keys=[client_id])
    freelancer = relationship("User", foreign_keys=[freelancer_id])
    milestones = relationship(
        "Milestone",
        back_populates="contract",
        order_by="Milestone.id",
        cascade="all, delete-orphan",
    )
    payments = relationship("Payment", back_populates="contract")
    invoices = relationship("Invoice", back_populates="contract")


class Milestone(Base):
    __tablename__ = "milestones"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Float, nullable=False)
    due_date = Column(DateTime, nullable=True)
    status = Column(String(30), default=MilestoneStatus.PENDING.value, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contract = relationship("Contract", back_populates="milestones")
    payments = relationship("Payment", back_populates="milestone", order_by="Payment.id")
    progress_updates = relationship(
        "MilestoneProgress",
        back_populates="milestone",
        order_by="MilestoneProgress.id.desc()",
        cascade="all, delete-orphan",
    )


class MilestoneProgress(Base):
    __tablename__ = "milestone_progress"

    id = Column(Integer, primary_key=True, index=True)
    milestone_id = Column(Integer, ForeignKey("milestones.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(String(30), nullable=False)  # Milestone status when the update was posted
    created_at = Column(DateTime, server_default=func.now())

    milestone = relationship("Milestone", back_populates="progress_updates")
    user = relationship("User")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    milestone_id = Column(Integer, ForeignKey("milestones.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Float, nullable=False)  # Copied from the milestone at creation
    currency = Column(String(10), nullable=False)
    status = Column(String(20), default=PaymentStatus.PENDING.value, nullable=False)
    payment_intent_id = Column(String(255), nullable=True, index=True)
    checkout_session_id = Column(String(255), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contract = relationship("Contract", back_populates="payments")
    milestone = relationship("Milestone", back_populates="payments")
    client = relationship("User", foreign_keys=[client_id])
    freelancer = relationship("User", foreign_keys=[freelancer_id])


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    reference_id = Column(Integer, nullable=True)
    reference_type = Column(String(30), nullable=True)  # PROJECT, BID, CONTRACT, MILESTONE, PAYMENT
    amount = Column(Float, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="notifications")


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(50), unique=True, nullable=False, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    freelancer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(String(20), default=InvoiceStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    issue_date = Column(DateTime, server_default=func.now())
    due_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contract = relationship("Contract", back_populates="invoices")
    client = relationship("User", foreign_keys=[client_id])
    freelancer = relationship("User", foreign_keys=[freelancer_id])


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("contract_id", "rater_id", name="uq_rating_contract_rater"),)

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    rater_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rated_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Float, nullable=False)  # 0.5 to 5 in half steps
    review = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    contract = relationship("Contract")
    rater = relationship("User", foreign_keys=[rater_id])
    rated_user = relationship("User", foreign_keys=[rated_user_id])
