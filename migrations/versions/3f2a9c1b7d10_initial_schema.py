"""initial schema

Revision ID: 3f2a9c1b7d10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f2a9c1b7d10"
down_revision = None
branch_labels = None
depends_on = None

# SQLAlchemy stores Python enums by member name.
user_role = sa.Enum("ADMIN", "USER", "GUEST", name="userrole")
condition = sa.Enum("NEW", "USED", name="condition")
age_kind = sa.Enum(
    "DAYS", "MONTHS", "YEARS", "BRAND_NEW", "UNKNOWN", name="agekind")
bargain_status = sa.Enum("PENDING", "ACCEPTED", name="bargainstatus")
delivery_option = sa.Enum("PICKUP", "DELIVERY", name="deliveryoption")
delivery_status = sa.Enum(
    "DRIVER_PENDING_ASSIGNMENT",
    "PENDING",
    "DRIVER_ASSIGNED",
    "PICKING_UP",
    "IN_TRANSIT",
    "DELIVERED",
    "COMPLETED",
    "FAILED",
    name="deliverystatus",
)
shopkeeper_action = sa.Enum("LIKED", "IN_CART", name="shopkeeperaction")


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("principal", sa.String(length=200), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("users", schema=None) as batch_op:
        batch_op.create_index(
            "ix_users_principal", ["principal"], unique=True)

    op.create_table(
        "shop_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("distance_km", sa.Float(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("price_info", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=False),
        sa.Column("location_url", sa.String(length=500), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "rating >= 1 AND rating <= 5", name="check_shop_rating_range"),
        sa.CheckConstraint("distance_km >= 0", name="check_distance_positive"),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("shop_profiles", schema=None) as batch_op:
        batch_op.create_index("ix_shop_profiles_owner_id", ["owner_id"])

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("condition", condition, nullable=False),
        sa.Column("return_policy", sa.Text(), nullable=False),
        sa.Column("age_kind", age_kind, nullable=True),
        sa.Column("age_amount", sa.Integer(), nullable=True),
        sa.Column("age_description", sa.Text(), nullable=True),
        sa.Column("photos_json", sa.Text(), nullable=True),
        sa.Column("listing_quality_score", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_by", sa.Integer(), nullable=True),
        sa.CheckConstraint("price >= 0", name="check_price_non_negative"),
        sa.ForeignKeyConstraint(["shop_id"], ["shop_profiles.id"]),
        sa.ForeignKeyConstraint(["deleted_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.create_index("ix_products_shop_id", ["shop_id"])
        batch_op.create_index("ix_products_name", ["name"])

    op.create_table(
        "verification_labels",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("label_text", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(
            ["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("verification_labels", schema=None) as batch_op:
        batch_op.create_index(
            "ix_verification_labels_product_id", ["product_id"])

    op.create_table(
        "bargain_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("shopkeeper_id", sa.Integer(), nullable=False),
        sa.Column("desired_price", sa.Integer(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("status", bargain_status, nullable=False),
        sa.Column("mutually_accepted", sa.Boolean(), nullable=False),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "desired_price >= 0", name="check_desired_price_non_negative"),
        sa.ForeignKeyConstraint(["customer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["shopkeeper_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("bargain_requests", schema=None) as batch_op:
        batch_op.create_index(
            "ix_bargain_requests_product_id", ["product_id"])
        batch_op.create_index("ix_bargain_requests_shop_id", ["shop_id"])
        batch_op.create_index(
            "ix_bargain_requests_customer_id", ["customer_id"])
        batch_op.create_index(
            "ix_bargain_requests_shopkeeper_id", ["shopkeeper_id"])
        batch_op.create_index(
            "ix_bargain_requests_created_at", ["created_at"])

    op.create_table(
        "carts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("insurance_name", sa.String(length=100), nullable=True),
        sa.Column("insurance_details", sa.Text(), nullable=True),
        sa.Column("insurance_premium", sa.Integer(), nullable=True),
        sa.Column("insurance_coverage", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    )

    op.create_table(
        "cart_items",
        sa.Column("cart_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="check_quantity_positive"),
        sa.ForeignKeyConstraint(["cart_id"], ["carts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("cart_id", "product_id"),
    )

    op.create_table(
        "wishlist_items",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "product_id"),
    )

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sender_id", sa.Integer(), nullable=False),
        sa.Column("recipient_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["sender_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["recipient_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("chat_messages", schema=None) as batch_op:
        batch_op.create_index("ix_chat_messages_sender_id", ["sender_id"])
        batch_op.create_index(
            "ix_chat_messages_recipient_id", ["recipient_id"])
        batch_op.create_index("ix_chat_messages_product_id", ["product_id"])
        batch_op.create_index("ix_chat_messages_created_at", ["created_at"])

    op.create_table(
        "shopkeeper_notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("action", shopkeeper_action, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table(
            "shopkeeper_notifications", schema=None) as batch_op:
        batch_op.create_index(
            "ix_shopkeeper_notifications_shop_id", ["shop_id"])
        batch_op.create_index(
            "ix_shopkeeper_notifications_created_at", ["created_at"])

    op.create_table(
        "delivery_partners",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("vehicle_type", sa.String(length=50), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("delivery_partners", schema=None) as batch_op:
        batch_op.create_index("ix_delivery_partners_user_id", ["user_id"])

    op.create_table(
        "delivery_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("shop_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), nullable=False),
        sa.Column("driver_id", sa.Integer(), nullable=True),
        sa.Column("status", delivery_status, nullable=False),
        sa.Column("delivery_option", delivery_option, nullable=False),
        sa.Column("pickup_location", sa.String(length=255), nullable=False),
        sa.Column("dropoff_location", sa.String(length=255), nullable=False),
        sa.Column("delivery_fee", sa.Integer(), nullable=False),
        sa.Column("completion_code", sa.String(length=12), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "delivery_fee >= 0", name="check_delivery_fee_non_negative"),
        sa.ForeignKeyConstraint(["shop_id"], ["shop_profiles.id"]),
        sa.ForeignKeyConstraint(["customer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["driver_id"], ["delivery_partners.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("delivery_orders", schema=None) as batch_op:
        batch_op.create_index("ix_delivery_orders_shop_id", ["shop_id"])
        batch_op.create_index(
            "ix_delivery_orders_customer_id", ["customer_id"])
        batch_op.create_index("ix_delivery_orders_driver_id", ["driver_id"])

    op.create_table(
        "blobs",
        sa.Column("ref", sa.String(length=64), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=True),
        sa.Column("size", sa.Integer(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["uploaded_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("ref"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("actor_role", sa.String(length=20), nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("target_type", sa.String(length=50), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("ip", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["actor_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("audit_logs", schema=None) as batch_op:
        batch_op.create_index("ix_audit_logs_created_at", ["created_at"])


def downgrade():
    for table in (
        "audit_logs",
        "blobs",
        "delivery_orders",
        "delivery_partners",
        "shopkeeper_notifications",
        "chat_messages",
        "wishlist_items",
        "cart_items",
        "carts",
        "bargain_requests",
        "verification_labels",
        "products",
        "shop_profiles",
        "users",
    ):
        op.drop_table(table)
