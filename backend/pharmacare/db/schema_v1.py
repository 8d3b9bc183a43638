"""
Schema as created by migration 1, frozen.

These Core tables must never follow later model changes: a column added to
a model needs a new migration, not an edit here. Migration 2 seeds through
the same tables so it too stays valid on a fresh database.
"""
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

from pharmacare.db.base import utcnow

metadata = MetaData()

PAYMENT_MODES_CHECK = "payment_mode IN ('cash', 'card', 'upi', 'credit')"

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("username", String(64), unique=True, nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("full_name", String(255), nullable=False),
    Column("role", String(32), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
    CheckConstraint("role IN ('admin', 'pharmacist', 'cashier')", name="ck_users_role"),
)

gst_slabs = Table(
    "gst_slabs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("rate", Numeric(5, 2), unique=True, nullable=False),
    Column("description", String(255), nullable=False),
)

medicines = Table(
    "medicines",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("generic_name", String(255), nullable=True),
    Column("brand_name", String(255), nullable=True),
    Column("manufacturer", String(255), nullable=True),
    Column("dosage_form", String(64), nullable=False),
    Column("strength", String(64), nullable=True),
    Column("category", String(128), nullable=True),
    Column("hsn_code", String(16), nullable=False),
    Column("gst_slab_id", Integer, ForeignKey("gst_slabs.id"), nullable=False),
    Column("reorder_level", Integer, nullable=False),
    Column("is_active", Boolean, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    CheckConstraint("reorder_level >= 0", name="ck_medicines_reorder_level"),
    Index("idx_medicines_name", "name"),
)

batches = Table(
    "batches",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("medicine_id", Integer, ForeignKey("medicines.id"), nullable=False),
    Column("batch_number", String(64), nullable=False),
    Column("expiry_date", Date, nullable=False),
    Column("manufacturing_date", Date, nullable=True),
    Column("cost_price_paise", Integer, nullable=False),
    Column("mrp_paise", Integer, nullable=False),
    Column("selling_price_paise", Integer, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    CheckConstraint("selling_price_paise <= mrp_paise", name="ck_batches_selling_le_mrp"),
    CheckConstraint("cost_price_paise >= 0", name="ck_batches_cost_nonneg"),
    CheckConstraint("mrp_paise > 0", name="ck_batches_mrp_positive"),
    CheckConstraint("selling_price_paise > 0", name="ck_batches_selling_positive"),
    CheckConstraint("quantity >= 0", name="ck_batches_quantity_nonneg"),
    Index("idx_batches_medicine_id", "medicine_id"),
    Index("idx_batches_expiry_date", "expiry_date"),
)

customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("phone", String(64), nullable=True),
    Column("email", String(255), nullable=True),
    Column("address", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Index("idx_customers_name", "name"),
    Index("idx_customers_phone", "phone"),
)

suppliers = Table(
    "suppliers",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("phone", String(64), nullable=True),
    Column("email", String(255), nullable=True),
    Column("address", Text, nullable=True),
    Column("gst_in", String(32), nullable=True),
    Column("drug_license_no", String(64), nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Index("idx_suppliers_name", "name"),
)

supplier_payments = Table(
    "supplier_payments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("supplier_id", Integer, ForeignKey("suppliers.id"), nullable=False),
    Column("amount_paise", Integer, nullable=False),
    Column("payment_date", Date, nullable=False),
    Column("payment_mode", String(16), nullable=False),
    Column("reference", String(128), nullable=True),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    CheckConstraint("amount_paise > 0", name="ck_supplier_payments_amount_positive"),
    CheckConstraint(PAYMENT_MODES_CHECK, name="ck_supplier_payments_mode"),
)

sales = Table(
    "sales",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("invoice_number", String(32), unique=True, nullable=False),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("sale_date", DateTime, nullable=False),
    Column("subtotal_paise", Integer, nullable=False),
    Column("discount_paise", Integer, nullable=False),
    Column("total_cgst_paise", Integer, nullable=False),
    Column("total_sgst_paise", Integer, nullable=False),
    Column("total_gst_paise", Integer, nullable=False),
    Column("grand_total_paise", Integer, nullable=False),
    Column("payment_mode", String(16), nullable=False),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    CheckConstraint(PAYMENT_MODES_CHECK, name="ck_sales_payment_mode"),
    CheckConstraint("total_gst_paise = total_cgst_paise + total_sgst_paise", name="ck_sales_gst_split"),
    CheckConstraint(
        "grand_total_paise = subtotal_paise - discount_paise + total_gst_paise",
        name="ck_sales_grand_total",
    ),
    Index("idx_sales_invoice_number", "invoice_number"),
    Index("idx_sales_sale_date", "sale_date"),
)

sale_items = Table(
    "sale_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("sale_id", Integer, ForeignKey("sales.id"), nullable=False),
    Column("batch_id", Integer, ForeignKey("batches.id"), nullable=False),
    Column("medicine_id", Integer, ForeignKey("medicines.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price_paise", Integer, nullable=False),
    Column("discount_paise", Integer, nullable=False),
    Column("taxable_amount_paise", Integer, nullable=False),
    Column("cgst_rate", Numeric(5, 2), nullable=False),
    Column("cgst_amount_paise", Integer, nullable=False),
    Column("sgst_rate", Numeric(5, 2), nullable=False),
    Column("sgst_amount_paise", Integer, nullable=False),
    Column("total_paise", Integer, nullable=False),
    Column("hsn_code", String(16), nullable=True),
    CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
    CheckConstraint("discount_paise >= 0", name="ck_sale_items_discount_nonneg"),
    CheckConstraint(
        "taxable_amount_paise = unit_price_paise * quantity - discount_paise",
        name="ck_sale_items_taxable",
    ),
    CheckConstraint(
        "total_paise = taxable_amount_paise + cgst_amount_paise + sgst_amount_paise",
        name="ck_sale_items_total",
    ),
    Index("idx_sale_items_sale_id", "sale_id"),
)

prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False),
    Column("sale_id", Integer, ForeignKey("sales.id"), nullable=True),
    Column("doctor_name", String(255), nullable=False),
    Column("rx_number", String(64), nullable=True),
    Column("prescription_date", Date, nullable=False),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Index("idx_prescriptions_customer_id", "customer_id"),
)

pharmacy_settings = Table(
    "pharmacy_settings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String(255), nullable=False),
    Column("address", Text, nullable=False),
    Column("phone", String(64), nullable=False),
    Column("email", String(255), nullable=True),
    Column("gstin", String(32), nullable=False),
    Column("drug_license_no", String(64), nullable=False),
    Column("state_code", String(8), nullable=False),
    Column("invoice_prefix", String(16), nullable=False, default="INV"),
    Column("next_invoice_number", Integer, nullable=False, default=1),
    Column("low_stock_threshold", Integer, nullable=False, default=20),
    Column("near_expiry_days", Integer, nullable=False, default=90),
    Column("created_at", DateTime, nullable=False, default=utcnow),
    Column("updated_at", DateTime, nullable=False, default=utcnow),
    CheckConstraint("id = 1", name="ck_pharmacy_settings_singleton"),
    CheckConstraint("next_invoice_number >= 1", name="ck_pharmacy_settings_invoice_counter"),
    CheckConstraint("low_stock_threshold >= 0", name="ck_pharmacy_settings_low_stock"),
    CheckConstraint("near_expiry_days >= 0", name="ck_pharmacy_settings_near_expiry"),
)
