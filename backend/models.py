from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey, Boolean, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


# --- Enums (stored as VARCHAR so new values don't need a migration) ---

class ServiceType(str, enum.Enum):
    SITE_ASSESSMENT = "site-assessment"
    FLEET_TRACKING = "fleet-tracking"
    FLEET_CAMERA = "fleet-camera"


class AssessmentStatus(str, enum.Enum):
    DRAFT = "draft"
    COMPLETED = "completed"


class QuoteStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CLOSED = "closed"


class PartnerStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"


class InvitationStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class FileType(str, enum.Enum):
    PHOTO = "photo"
    DOCUMENT = "document"


# --- Tables ---

class User(Base):
    """Partner and admin accounts."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    role = Column(String, default="partner")  # 'partner' | 'admin'
    is_system_admin = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")
    organization = relationship("Organization", back_populates="user", uselist=False)
    assessments = relationship("Assessment", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return bool(self.is_system_admin) or self.role == "admin"


class AuthToken(Base):
    """Hashed refresh tokens. Access tokens are stateless."""
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    token_hash = Column(String, nullable=False)
    token_type = Column(String, default="refresh")
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_tokens")


class Organization(Base):
    """A partner company. One per partner user."""
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    partner_organization = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    partner_status = Column(String, default=PartnerStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="organization")
    assessments = relationship("Assessment", back_populates="organization")


class Assessment(Base):
    """One customer engagement, filled in step by step by the wizard."""
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)
    service_type = Column(String, default=ServiceType.SITE_ASSESSMENT.value)

    # Step 1: sales executive
    sales_executive_name = Column(String, nullable=True)
    sales_executive_email = Column(String, nullable=True)
    sales_executive_phone = Column(String, nullable=True)

    # Step 2: customer
    customer_company_name = Column(String, nullable=True)
    customer_contact_name = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)
    site_address = Column(Text, nullable=True)
    industry = Column(String, nullable=True)
    preferred_installation_date = Column(DateTime, nullable=True)

    # Step 3: site assessment
    building_type = Column(String, nullable=True)
    coverage_area = Column(Integer, nullable=True)
    floors = Column(Integer, nullable=True)
    device_count = Column(Integer, nullable=True)
    router_count = Column(Integer, nullable=True)
    total_fleet_size = Column(Integer, nullable=True)
    power_available = Column(Boolean, default=False)
    ethernet_required = Column(Boolean, default=False)
    ceiling_mount = Column(Boolean, default=False)
    outdoor_coverage = Column(Boolean, default=False)
    network_signal = Column(String, nullable=True)
    signal_strength = Column(String, nullable=True)
    connection_usage = Column(String, nullable=True)  # 'primary' | 'failover'
    router_location = Column(String, nullable=True)
    antenna_cable = Column(String, nullable=True)
    device_connection_assistance = Column(String, nullable=True)
    low_signal_antenna_cable = Column(String, nullable=True)  # 'yes' | 'no'
    antenna_type = Column(String, nullable=True)
    antenna_installation_location = Column(Text, nullable=True)
    router_mounting = Column(String, nullable=True)
    dual_wan_support = Column(String, nullable=True)
    ceiling_height = Column(String, nullable=True)
    ceiling_type = Column(String, nullable=True)
    router_make = Column(String, nullable=True)
    router_model = Column(String(20), nullable=True)
    cable_footage = Column(String, nullable=True)
    camera_types = Column(JSON, nullable=True)  # fleet-camera: list of camera positions
    existing_system_removal = Column(String, nullable=True)  # fleet-camera: 'yes' | 'no'
    interference_sources = Column(Text, nullable=True)
    special_requirements = Column(Text, nullable=True)

    # Step 5: quote
    total_cost = Column(Numeric(10, 2), nullable=True)
    additional_notes = Column(Text, nullable=True)

    status = Column(String, default=AssessmentStatus.DRAFT.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="assessments")
    organization = relationship("Organization", back_populates="assessments")
    quotes = relationship("Quote", back_populates="assessment", cascade="all, delete-orphan")
    files = relationship("UploadedFile", back_populates="assessment", cascade="all, delete-orphan")


class Quote(Base):
    """Priced artifact derived from an Assessment."""
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False)
    quote_number = Column(String, unique=True, nullable=False)

    # Pricing breakdown, hours and money as fixed-point decimals
    survey_hours = Column(Numeric(10, 2), default=0)
    survey_cost = Column(Numeric(10, 2), default=0)
    installation_hours = Column(Numeric(10, 2), default=0)
    installation_cost = Column(Numeric(10, 2), default=0)
    configuration_hours = Column(Numeric(10, 2), default=0)
    configuration_cost = Column(Numeric(10, 2), default=0)
    labor_hold_hours = Column(Numeric(10, 2), default=0)
    labor_hold_cost = Column(Numeric(10, 2), default=0)
    removal_hours = Column(Numeric(10, 2), nullable=True)
    removal_cost = Column(Numeric(10, 2), nullable=True)
    hardware_cost = Column(Numeric(10, 2), default=0)
    training_cost = Column(Numeric(10, 2), default=0)
    total_cost = Column(Numeric(10, 2), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=True)

    status = Column(String, default=QuoteStatus.PENDING.value)
    portal_token = Column(String, unique=True, nullable=False)
    customer_feedback = Column(Text, nullable=True)
    pdf_url = Column(String, nullable=True)
    email_sent = Column(Boolean, default=False)
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assessment = relationship("Assessment", back_populates="quotes")


class UploadedFile(Base):
    """Photo or document attached to an Assessment."""
    __tablename__ = "uploaded_files"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False)
    file_name = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    file_type = Column(String, nullable=False)  # 'photo' | 'document'
    mime_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    file_path = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    assessment = relationship("Assessment", back_populates="files")


class PartnerInvitation(Base):
    """Email-based partner onboarding record."""
    __tablename__ = "partner_invitations"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False)
    recipient_name = Column(String, nullable=True)
    company_name = Column(String, nullable=True)
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    invited_by_name = Column(String, nullable=True)
    invitation_token = Column(String, unique=True, nullable=False)
    status = Column(String, default=InvitationStatus.PENDING.value)
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    inviter = relationship("User")
