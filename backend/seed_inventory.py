"""Seed a demo catalogue of common Indian medicines, each with one stock batch.

Usage (from backend/):
    python seed_inventory.py

Runs migrations first. Medicines already in the catalogue (same name) are
skipped, so the script can be run again safely.
"""
import logging
from datetime import date, timedelta

from pharmacare.core.config import settings
from pharmacare.db.init_db import init_db
from pharmacare.db.session import SessionLocal
from pharmacare.schemas.batch import BatchCreate
from pharmacare.schemas.medicine import MedicineCreate
from pharmacare.services import batch_service, medicine_service
from pharmacare.services.currency import format_paise, rupees_to_paise

# name, generic, dosage form, strength, GST %, MRP (rupees), selling (rupees), units
DEMO_MEDICINES = [
    ("Paracetamol 500mg", "Paracetamol", "tablet", "500mg", 5, "10.00", "9.00", 200),
    ("Dolo 650", "Paracetamol", "tablet", "650mg", 5, "3.20", "3.00", 180),
    ("Crocin Advance", "Paracetamol", "tablet", "500mg", 5, "4.80", "4.50", 150),
    ("Cetirizine 10mg", "Cetirizine", "tablet", "10mg", 12, "2.00", "1.80", 120),
    ("Azithromycin 500mg", "Azithromycin", "tablet", "500mg", 12, "24.00", "22.00", 60),
    ("Amoxicillin 500mg", "Amoxicillin", "capsule", "500mg", 12, "9.50", "8.50", 80),
    ("Pantoprazole 40mg", "Pantoprazole", "tablet", "40mg", 12, "7.00", "6.50", 100),
    ("ORS Sachet", "Oral Rehydration Salts", "powder", "21g", 5, "22.00", "20.00", 50),
    ("Benadryl Cough Syrup", "Diphenhydramine", "syrup", "100ml", 12, "125.00", "118.00", 25),
    ("Vitamin C 500mg", "Ascorbic Acid", "tablet", "500mg", 18, "3.00", "2.75", 90),
    ("Betadine Ointment", "Povidone Iodine", "ointment", "15g", 12, "95.00", "90.00", 18),
    ("Insulin Glargine", "Insulin Glargine", "injection", "100IU/ml", 5, "780.00", "760.00", 10),
]


def _slab_ids(db) -> dict:
    return {int(slab.rate): slab.id for slab in medicine_service.list_gst_slabs(db)}


def seed_inventory() -> int:
    init_db()
    db = SessionLocal()
    created = 0
    try:
        slabs = _slab_ids(db)
        expiry = date.today() + timedelta(days=540)

        for index, (name, generic, form, strength, rate, mrp, selling, units) in enumerate(DEMO_MEDICINES, 1):
            if medicine_service.find_medicines_by_name(db, name):
                print(f"  - {name}: already in catalogue, skipped")
                continue

            medicine = medicine_service.create_medicine(
                db,
                MedicineCreate(
                    name=name,
                    generic_name=generic,
                    dosage_form=form,
                    strength=strength,
                    gst_slab_id=slabs[rate],
                ),
            )
            selling_paise = rupees_to_paise(selling)
            batch_service.receive_batch(
                db,
                medicine.id,
                BatchCreate(
                    batch_number=f"DEMO{index:03d}",
                    expiry_date=expiry,
                    cost_price_paise=selling_paise * 7 // 10,
                    mrp_paise=rupees_to_paise(mrp),
                    selling_price_paise=selling_paise,
                    quantity=units,
                ),
            )
            created += 1
            print(f"  + {medicine.label()} ({rate}% GST) {format_paise(selling_paise)} x {units}")
    finally:
        db.close()

    print(f"\n[OK] Added {created} medicines to {settings.DATABASE_URL}")
    return created


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    seed_inventory()
