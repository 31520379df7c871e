"""
Basic Python example for QIWI Bill Payments

This is a minimal working example showing how to:
- Create a bill and print its payment URL
- Check the bill status
- Verify a notification signature
"""

import logging
import os
from qiwi_bill_payments import BillPayments, BillPaymentsError
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logging.basicConfig(level=logging.DEBUG)


def main():
    billing = BillPayments(key=os.getenv("QIWI_SECRET_KEY", ""))

    with billing:
        bill_id = billing.generate_id()
        print(f"🧾 Creating bill {bill_id}")

        bill = billing.create_bill(bill_id, {
            "amount": os.getenv("QIWI_AMOUNT", "1.00"),
            "currency": "RUB",
            "comment": "Test bill",
            "expirationDateTime": billing.get_lifetime_by_day(1),
            "successUrl": os.getenv("QIWI_SUCCESS_URL")
        })
        print(f"   Pay URL: {bill['payUrl']}")

        info = billing.get_bill_info(bill_id)
        print(f"   Status: {info['status']['value']}")

        # Checkout link without an API call
        link = billing.create_payment_form({
            "publicKey": os.getenv("QIWI_PUBLIC_KEY", ""),
            "amount": 1,
            "billId": billing.generate_id()
        })
        print(f"🔗 Checkout link: {link}")

    # Notification handler body
    notification = {
        "bill": {
            "siteId": "test",
            "billId": "test_bill",
            "amount": {"value": 1, "currency": "RUB"},
            "status": {"value": "PAID"}
        }
    }
    valid = billing.check_notification_signature(
        "07e0ebb10916d97760c196034105d010607a6c6b7d72bfa1c3451448ac484a3b",
        notification,
        "test-merchant-secret-for-signature-check"
    )
    print(f"✅ Notification signature valid: {valid}")


# Start
if __name__ == "__main__":
    try:
        main()
    except BillPaymentsError as e:
        print(f"Request failed: {e} (status {e.status_code})")
        exit(1)
