"""
Project: Smart Restaurant Management System (SRMS)
School: UMGC – Software Development and Security
Authors: Beby Alexis, Kevin Wong, David White Jr
Date: October 2025

Description:
Database models for the support chat subsystem. Orders, profiles and
customers are reference data owned by the ordering platform; SupportChat
holds the conversation with its messages stored as a JSON list.
"""

import enum
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


def iso(value):
    if value is None:
        return None
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class ChatStatus(str, enum.Enum):
    active = "active"
    resolved = "resolved"
    closed = "closed"


class Order(db.Model):
    id = db.Column(db.String(36), primary_key=True)
    customer_id = db.Column(db.String(64), nullable=True)
    user_id = db.Column(db.String(64), nullable=True)
    total_amount = db.Column(db.Float, default=0.0)
    status = db.Column(db.String(20), default="pending")
    table_number = db.Column(db.String(20), nullable=True)
    customer_name = db.Column(db.String(120), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "user_id": self.user_id,
            "total_amount": self.total_amount,
            "status": self.status,
            "table_number": self.table_number,
            "customer_name": self.customer_name,
            "created_at": iso(self.created_at),
        }


class Profile(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=True)
    first_name = db.Column(db.String(80), nullable=True)
    last_name = db.Column(db.String(80), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "first_name": self.first_name, "last_name": self.last_name, "email": self.email, "phone": self.phone}


class Customer(db.Model):
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(40), nullable=True)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}


class SupportChat(db.Model):
    __tablename__ = "support_chat"
    __table_args__ = (
        # at most one active chat per order
        db.Index(
            "uq_support_chat_active_order",
            "order_id",
            unique=True,
            sqlite_where=db.text("status = 'active'"),
            postgresql_where=db.text("status = 'active'"),
        ),
    )

    id = db.Column(db.String(36), primary_key=True)
    order_id = db.Column(db.String(36), nullable=False, index=True)
    customer_id = db.Column(db.String(64), nullable=False, index=True)
    issue = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(40), default="order-issue")
    status = db.Column(db.String(20), nullable=False, default=ChatStatus.active.value, index=True)
    messages = db.Column(db.JSON, nullable=False, default=list)
    customer_details = db.Column(db.JSON, nullable=True)
    order_details = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    last_message_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    resolved_by = db.Column(db.String(64), nullable=True)
    resolved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "issue": self.issue,
            "category": self.category,
            "status": self.status,
            "messages": [dict(m) for m in (self.messages or [])],
            "customer_details": dict(self.customer_details) if self.customer_details else None,
            "order_details": dict(self.order_details) if self.order_details else None,
            "created_at": iso(self.created_at),
            "last_message_at": iso(self.last_message_at),
            "resolved_by": self.resolved_by,
            "resolved_at": iso(self.resolved_at),
        }
