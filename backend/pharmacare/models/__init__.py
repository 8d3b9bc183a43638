from pharmacare.models.user import User
from pharmacare.models.gst_slab import GstSlab
from pharmacare.models.medicine import Medicine
from pharmacare.models.batch import Batch
from pharmacare.models.customer import Customer
from pharmacare.models.supplier import Supplier, SupplierPayment
from pharmacare.models.sale import Sale, SaleItem
from pharmacare.models.prescription import Prescription
from pharmacare.models.pharmacy_settings import PharmacySettings

__all__ = [
    "User", "GstSlab", "Medicine", "Batch", "Customer", "Supplier", "SupplierPayment",
    "Sale", "SaleItem", "Prescription", "PharmacySettings",
]
