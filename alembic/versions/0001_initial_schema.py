"""Initial schema: accounts, farms, production and sales tables.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Accounts / reference data ────────────────────────────

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(20)),
        sa.Column(
            "role",
            sa.Enum("ADMIN", "FARM_OWNER", "WORKER", name="userrole"),
            server_default="FARM_OWNER",
        ),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "breeds",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("breed_type", sa.String(20), nullable=False),
        sa.Column("fcr_standard", sa.Float()),
        sa.Column("description", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Farms / houses ───────────────────────────────────────

    op.create_table(
        "farms",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text()),
        sa.Column("province", sa.String(100)),
        sa.Column("district", sa.String(100)),
        sa.Column("subdistrict", sa.String(100)),
        sa.Column("postal_code", sa.String(10)),
        sa.Column("manager_name", sa.String(255)),
        sa.Column("phone", sa.String(20)),
        sa.Column("email", sa.String(255)),
        sa.Column("farm_type", sa.String(20), server_default="mixed"),
        sa.Column("license_number", sa.String(100)),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_farms_owner_id", "farms", ["owner_id"])
    op.create_index("ix_farms_is_active", "farms", ["is_active"])

    op.create_table(
        "houses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("farm_id", sa.Integer(), sa.ForeignKey("farms.id"), nullable=False),
        sa.Column("house_code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255)),
        sa.Column("house_type", sa.String(20), server_default="open"),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("area_sqm", sa.Float()),
        sa.Column("width_meters", sa.Float()),
        sa.Column("length_meters", sa.Float()),
        sa.Column("height_meters", sa.Float()),
        sa.Column("ventilation_type", sa.String(100)),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_houses_farm_id", "houses", ["farm_id"])
    op.create_index(
        "uq_houses_farm_code_active", "houses", ["farm_id", "house_code"],
        unique=True, postgresql_where=sa.text("is_active"),
    )

    # ── Production ───────────────────────────────────────────

    op.create_table(
        "batches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("farm_id", sa.Integer(), sa.ForeignKey("farms.id"), nullable=False),
        sa.Column("house_id", sa.Integer(), sa.ForeignKey("houses.id"), nullable=False),
        sa.Column("breed_id", sa.Integer(), sa.ForeignKey("breeds.id"), nullable=False),
        sa.Column("batch_code", sa.String(50), nullable=False),
        sa.Column("bird_type", sa.String(20), nullable=False),
        sa.Column("initial_count", sa.Integer(), nullable=False),
        sa.Column("current_count", sa.Integer(), nullable=False),
        sa.Column("placement_date", sa.Date(), nullable=False),
        sa.Column("expected_harvest_date", sa.Date()),
        sa.Column("actual_harvest_date", sa.Date()),
        sa.Column("placement_age_days", sa.Integer(), server_default="0"),
        sa.Column("source_farm", sa.String(255)),
        sa.Column("cost_per_bird", sa.Numeric(10, 2)),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("notes", sa.Text()),
        sa.Column("completion_notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("farm_id", "batch_code", name="uq_batches_farm_code"),
    )
    op.create_index("ix_batches_farm_id", "batches", ["farm_id"])
    op.create_index("ix_batches_house_id", "batches", ["house_id"])
    op.create_index("ix_batches_status", "batches", ["status"])

    op.create_table(
        "daily_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id"), nullable=False),
        sa.Column("record_date", sa.Date(), nullable=False),
        sa.Column("bird_count", sa.Integer(), nullable=False),
        sa.Column("mortality_count", sa.Integer(), server_default="0"),
        sa.Column("culled_count", sa.Integer(), server_default="0"),
        sa.Column("feed_consumed_kg", sa.Float()),
        sa.Column("water_consumed_liters", sa.Float()),
        sa.Column("avg_weight_grams", sa.Float()),
        sa.Column("temperature_celsius", sa.Float()),
        sa.Column("humidity_percent", sa.Float()),
        sa.Column("notes", sa.Text()),
        sa.Column("recorded_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("batch_id", "record_date", name="uq_daily_records_batch_date"),
    )
    op.create_index("ix_daily_records_batch_id", "daily_records", ["batch_id"])
    op.create_index("ix_daily_records_record_date", "daily_records", ["record_date"])

    op.create_table(
        "egg_production",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id"), nullable=False),
        sa.Column("production_date", sa.Date(), nullable=False),
        sa.Column("total_eggs", sa.Integer(), server_default="0"),
        sa.Column("grade_0_count", sa.Integer(), server_default="0"),
        sa.Column("grade_1_count", sa.Integer(), server_default="0"),
        sa.Column("grade_2_count", sa.Integer(), server_default="0"),
        sa.Column("grade_3_count", sa.Integer(), server_default="0"),
        sa.Column("broken_eggs", sa.Integer(), server_default="0"),
        sa.Column("double_yolk_eggs", sa.Integer(), server_default="0"),
        sa.Column("avg_egg_weight_grams", sa.Float()),
        sa.Column("notes", sa.Text()),
        sa.Column("recorded_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "batch_id", "production_date", name="uq_egg_production_batch_date"
        ),
    )
    op.create_index("ix_egg_production_batch_id", "egg_production", ["batch_id"])
    op.create_index("ix_egg_production_production_date", "egg_production", ["production_date"])

    # ── Sales ────────────────────────────────────────────────

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("farm_id", sa.Integer(), sa.ForeignKey("farms.id"), nullable=False),
        sa.Column("customer_code", sa.String(50), nullable=False),
        sa.Column("customer_type", sa.String(20), server_default="individual"),
        sa.Column("company_name", sa.String(255)),
        sa.Column("contact_person", sa.String(255)),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("phone", sa.String(20)),
        sa.Column("email", sa.String(255)),
        sa.Column("address", sa.Text()),
        sa.Column("province", sa.String(100)),
        sa.Column("district", sa.String(100)),
        sa.Column("subdistrict", sa.String(100)),
        sa.Column("postal_code", sa.String(10)),
        sa.Column("tax_id", sa.String(20)),
        sa.Column("credit_limit", sa.Numeric(12, 2), server_default="0"),
        sa.Column("payment_terms_days", sa.Integer(), server_default="0"),
        sa.Column("discount_percent", sa.Numeric(5, 2), server_default="0"),
        sa.Column("preferred_products", sa.JSON(), server_default="[]"),
        sa.Column("delivery_address", sa.Text()),
        sa.Column("delivery_notes", sa.Text()),
        sa.Column("is_active", sa.Boolean(), server_default="true"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_customers_farm_id", "customers", ["farm_id"])
    op.create_index(
        "uq_customers_farm_code_active", "customers", ["farm_id", "customer_code"],
        unique=True, postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "customer_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("farm_id", sa.Integer(), sa.ForeignKey("farms.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("order_number", sa.String(50), nullable=False),
        sa.Column("order_date", sa.Date(), nullable=False),
        sa.Column("delivery_date", sa.Date()),
        sa.Column("total_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("discount_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("tax_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("net_amount", sa.Numeric(12, 2), server_default="0"),
        sa.Column("delivery_address", sa.Text()),
        sa.Column("delivery_notes", sa.Text()),
        sa.Column("special_instructions", sa.Text()),
        sa.Column("status", sa.String(20), server_default="pending"),
        sa.Column("payment_status", sa.String(20), server_default="unpaid"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("farm_id", "order_number", name="uq_orders_farm_number"),
    )
    op.create_index("ix_customer_orders_farm_id", "customer_orders", ["farm_id"])
    op.create_index("ix_customer_orders_customer_id", "customer_orders", ["customer_id"])
    op.create_index("ix_customer_orders_order_date", "customer_orders", ["order_date"])
    op.create_index("ix_customer_orders_status", "customer_orders", ["status"])
    op.create_index("ix_customer_orders_payment_status", "customer_orders", ["payment_status"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "order_id", sa.Integer(), sa.ForeignKey("customer_orders.id"), nullable=False
        ),
        sa.Column("product_type", sa.String(50), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("product_description", sa.Text()),
        sa.Column("grade", sa.String(20)),
        sa.Column("quantity", sa.Numeric(12, 2), nullable=False),
        sa.Column("unit", sa.String(20), server_default="unit"),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id")),
        sa.Column("harvest_date", sa.Date()),
        sa.Column("quality_notes", sa.Text()),
    )
    op.create_index("ix_order_items_order_id", "order_items", ["order_id"])

    op.create_table(
        "order_status_history",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "order_id", sa.Integer(), sa.ForeignKey("customer_orders.id"), nullable=False
        ),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("note", sa.Text()),
        sa.Column("changed_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("changed_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_order_status_history_order_id", "order_status_history", ["order_id"])

    op.create_table(
        "customer_payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("farm_id", sa.Integer(), sa.ForeignKey("farms.id"), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column(
            "order_id", sa.Integer(), sa.ForeignKey("customer_orders.id"), nullable=False
        ),
        sa.Column("payment_number", sa.String(50), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_method", sa.String(20), nullable=False),
        sa.Column("reference_number", sa.String(100)),
        sa.Column("notes", sa.Text()),
        sa.Column("received_by", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("farm_id", "payment_number", name="uq_payments_farm_number"),
    )
    op.create_index("ix_customer_payments_farm_id", "customer_payments", ["farm_id"])
    op.create_index("ix_customer_payments_customer_id", "customer_payments", ["customer_id"])
    op.create_index("ix_customer_payments_order_id", "customer_payments", ["order_id"])


def downgrade() -> None:
    op.drop_table("customer_payments")
    op.drop_table("order_status_history")
    op.drop_table("order_items")
    op.drop_table("customer_orders")
    op.drop_table("customers")
    op.drop_table("egg_production")
    op.drop_table("daily_records")
    op.drop_table("batches")
    op.drop_table("houses")
    op.drop_table("farms")
    op.drop_table("breeds")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
