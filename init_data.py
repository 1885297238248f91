from bargen import create_app
from bargen.extensions import db
from bargen.models import (
    AgeKind,
    Condition,
    Product,
    ShopProfile,
    User,
    UserRole,
    VerificationLabel,
)

app = create_app()

with app.app_context():
    # Create admin principal (if not exists)
    admin_principal = "admin-principal"
    admin = User.query.filter_by(principal=admin_principal).first()
    if not admin:
        admin = User(principal=admin_principal, role=UserRole.ADMIN)
        db.session.add(admin)
        print(f"Created admin principal: {admin_principal}")

    # Create shopkeepers, shops and products
    shops_data = [
        {
            "owner": "shopkeeper-ravi",
            "name": "Ravi Electronics",
            "address": "14 Lajpat Rai Market, Delhi",
            "distance_km": 1.2,
            "rating": 4,
            "price_info": "Fixed prices on new stock, open to offers on used",
            "phone": "+91 98110 22334",
            "products": [
                {
                    "name": "Wireless Headphones",
                    "description": "Noise cancelling, 30h battery",
                    "price": 4999,
                    "condition": Condition.NEW,
                    "age": (AgeKind.BRAND_NEW, None, ""),
                    "labels": [("Sealed box", "Factory seal intact")],
                },
                {
                    "name": "Smartphone Case",
                    "description": "Shock resistant case",
                    "price": 799,
                    "condition": Condition.USED,
                    "age": (AgeKind.MONTHS, 3, "Minor scuffs on corners"),
                    "labels": [],
                },
            ],
        },
        {
            "owner": "shopkeeper-meera",
            "name": "Meera Footwear",
            "address": "5 Linking Road, Mumbai",
            "distance_km": 3.5,
            "rating": 5,
            "price_info": "Bargains welcome on weekdays",
            "phone": "+91 99200 11223",
            "products": [
                {
                    "name": "Running Shoes",
                    "description": "Lightweight trainers, size 9",
                    "price": 3499,
                    "condition": Condition.NEW,
                    "age": None,
                    "labels": [("Bill available", "Original invoice")],
                },
                {
                    "name": "Wireless Headphones",
                    "description": "Open box, all accessories",
                    "price": 3999,
                    "condition": Condition.USED,
                    "age": (AgeKind.DAYS, 20, "Used twice"),
                    "labels": [],
                },
            ],
        },
        {
            "owner": "shopkeeper-anil",
            "name": "Anil Home Store",
            "address": "88 MG Road, Bengaluru",
            "distance_km": 6.0,
            "rating": 3,
            "price_info": "",
            "phone": "+91 80123 45678",
            "products": [
                {
                    "name": "Coffee Maker",
                    "description": "Drip coffee maker, 1.2L",
                    "price": 5999,
                    "condition": Condition.USED,
                    "age": (AgeKind.YEARS, 1, "Works well, descaled"),
                    "labels": [],
                },
                {
                    "name": "Running Shoes",
                    "description": "Worn once, size 9",
                    "price": 2499,
                    "condition": Condition.USED,
                    "age": (AgeKind.UNKNOWN, None, "Gift, age not known"),
                    "labels": [],
                },
            ],
        },
    ]

    for shop_data in shops_data:
        owner = User.query.filter_by(principal=shop_data["owner"]).first()
        if owner:
            continue
        owner = User(principal=shop_data["owner"], role=UserRole.USER)
        db.session.add(owner)
        db.session.flush()

        shop = ShopProfile(
            owner_id=owner.id,
            name=shop_data["name"],
            address=shop_data["address"],
            distance_km=shop_data["distance_km"],
            rating=shop_data["rating"],
            price_info=shop_data["price_info"],
            phone=shop_data["phone"],
        )
        db.session.add(shop)
        db.session.flush()
        print(f"Created shop: {shop_data['name']} ({shop_data['owner']})")

        for product_data in shop_data["products"]:
            product = Product(
                shop_id=shop.id,
                name=product_data["name"],
                description=product_data["description"],
                price=product_data["price"],
                condition=product_data["condition"],
                return_policy="Returns within 7 days with receipt",
            )
            if product_data["age"]:
                kind, amount, description = product_data["age"]
                product.age_kind = kind
                product.age_amount = amount
                product.age_description = description
            product.labels = [
                VerificationLabel(
                    position=i, label_text=text, description=description)
                for i, (text, description) in enumerate(product_data["labels"])
            ]
            db.session.add(product)
            print(f"  Created product: {product_data['name']}")

    db.session.commit()
    print("Data initialization completed!")
