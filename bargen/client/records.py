"""Typed records for values that cross the store boundary.

Every record is built from the store's JSON with ``from_dict`` and turned
back into request JSON with ``to_dict`` where the client sends it.
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional

# Age kinds carrying an amount; brandNew and unknown carry none.
AMOUNT_KINDS = ('days', 'months', 'years')
AGE_KINDS = AMOUNT_KINDS + ('brandNew', 'unknown')


@dataclass(frozen=True)
class SessionContext:
    """Who is calling. Each client is bound to exactly one."""
    principal: str

    def __post_init__(self):
        if not self.principal or not self.principal.strip():
            raise ValueError('principal cannot be empty')


@dataclass(frozen=True)
class AgeTime:
    kind: str
    amount: Optional[int] = None

    def __post_init__(self):
        if self.kind not in AGE_KINDS:
            raise ValueError(f'Unknown age kind: {self.kind}')
        if self.kind in AMOUNT_KINDS:
            if not isinstance(self.amount, int) or self.amount < 0:
                raise ValueError(f'{self.kind} age needs an amount >= 0')
        elif self.amount is not None:
            raise ValueError(f'{self.kind} age takes no amount')

    @classmethod
    def days(cls, amount):
        return cls('days', amount)

    @classmethod
    def months(cls, amount):
        return cls('months', amount)

    @classmethod
    def years(cls, amount):
        return cls('years', amount)

    @classmethod
    def brand_new(cls):
        return cls('brandNew')

    @classmethod
    def unknown(cls):
        return cls('unknown')

    def to_dict(self):
        data = {'kind': self.kind}
        if self.kind in AMOUNT_KINDS:
            data['amount'] = self.amount
        return data

    def describe(self):
        if self.kind == 'brandNew':
            return 'Brand new'
        if self.kind == 'unknown':
            return 'Age unknown'
        unit = self.kind if self.amount != 1 else self.kind[:-1]
        return f'{self.amount} {unit} old'


@dataclass(frozen=True)
class ProductAge:
    condition_description: str
    time: AgeTime

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return None
        time = data['time']
        return cls(
            condition_description=data.get('condition_description') or '',
            time=AgeTime(time['kind'], time.get('amount')),
        )

    def to_dict(self):
        return {
            'condition_description': self.condition_description,
            'time': self.time.to_dict(),
        }


@dataclass(frozen=True)
class VerificationLabel:
    label_text: str
    description: str = ''

    def to_dict(self):
        return {'label_text': self.label_text, 'description': self.description}


@dataclass(frozen=True)
class Shop:
    id: int
    owner: str
    name: str
    address: str
    distance_km: float
    rating: int
    price_info: str = ''
    phone: str = ''
    location_url: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            owner=data['owner'],
            name=data['name'],
            address=data.get('address', ''),
            distance_km=float(data.get('distance_km', 0.0)),
            rating=data['rating'],
            price_info=data.get('price_info', ''),
            phone=data.get('phone', ''),
            location_url=data.get('location_url', ''),
        )


@dataclass(frozen=True)
class Product:
    id: int
    shop_id: int
    name: str
    description: str
    price: int
    condition: str
    return_policy: str = ''
    age: Optional[ProductAge] = None
    verification_labels: List[VerificationLabel] = field(default_factory=list)
    photos: Optional[List[str]] = None
    listing_quality_score: Optional[int] = None
    shop: Optional[Shop] = None

    @classmethod
    def from_dict(cls, data):
        shop = data.get('shop')
        return cls(
            id=data['id'],
            shop_id=data['shop_id'],
            name=data['name'],
            description=data.get('description', ''),
            price=data['price'],
            condition=data['condition'],
            return_policy=data.get('return_policy', ''),
            age=ProductAge.from_dict(data.get('age')),
            verification_labels=[
                VerificationLabel(lb['label_text'], lb.get('description', ''))
                for lb in data.get('verification_labels') or []
            ],
            photos=data.get('photos'),
            listing_quality_score=data.get('listing_quality_score'),
            shop=Shop.from_dict(shop) if shop else None,
        )


@dataclass(frozen=True)
class BargainRequest:
    id: int
    product_id: int
    customer: str
    shopkeeper: str
    desired_price: int
    note: Optional[str]
    status: str
    mutually_accepted: bool
    timestamp: str

    @property
    def is_best_deal(self):
        return self.desired_price == 0

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            product_id=data['product_id'],
            customer=data['customer'],
            shopkeeper=data['shopkeeper'],
            desired_price=data['desired_price'],
            note=data.get('note'),
            status=data['status'],
            mutually_accepted=data['mutually_accepted'],
            timestamp=data['timestamp'],
        )


@dataclass(frozen=True)
class CartItem:
    product_id: int
    quantity: int

    @classmethod
    def from_dict(cls, data):
        return cls(product_id=data['product_id'], quantity=data['quantity'])


@dataclass(frozen=True)
class Insurance:
    name: str
    details: str
    premium: int
    coverage_amount: int

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return None
        return cls(
            name=data['name'],
            details=data.get('details', ''),
            premium=data['premium'],
            coverage_amount=data['coverage_amount'],
        )

    def to_dict(self):
        return {
            'name': self.name,
            'details': self.details,
            'premium': self.premium,
            'coverage_amount': self.coverage_amount,
        }


@dataclass(frozen=True)
class CartTotal:
    cart_items: List[CartItem]
    subtotal: int
    insurance: Optional[Insurance]
    insurance_premium: int
    total: int
    unavailable_items: List[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        return cls(
            cart_items=[CartItem.from_dict(i) for i in data['cart_items']],
            subtotal=data['subtotal'],
            insurance=Insurance.from_dict(data.get('insurance')),
            insurance_premium=data['insurance_premium'],
            total=data['total'],
            unavailable_items=list(data.get('unavailable_items') or []),
        )


@dataclass(frozen=True)
class Message:
    id: int
    sender: str
    recipient: str
    content: str
    product_id: int
    timestamp: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            sender=data['from'],
            recipient=data['to'],
            content=data['content'],
            product_id=data['product_id'],
            timestamp=data['timestamp'],
        )


@dataclass(frozen=True)
class UserProfile:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return None
        return cls(
            name=data['name'],
            email=data.get('email'),
            phone=data.get('phone'),
        )

    def to_dict(self):
        return {'name': self.name, 'email': self.email, 'phone': self.phone}


@dataclass(frozen=True)
class DeliveryPartner:
    id: int
    principal: str
    name: str
    vehicle_type: str
    location: str
    is_available: bool

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            principal=data['principal'],
            name=data['name'],
            vehicle_type=data['vehicle_type'],
            location=data.get('location', ''),
            is_available=data['is_available'],
        )


@dataclass(frozen=True)
class DeliveryOrder:
    id: int
    shop_id: int
    customer: str
    driver_id: Optional[int]
    status: str
    delivery_option: str
    pickup_location: str
    dropoff_location: str
    delivery_fee: int
    completion_code: Optional[str]
    timestamp: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            shop_id=data['shop_id'],
            customer=data['customer'],
            driver_id=data.get('driver_id'),
            status=data['status'],
            delivery_option=data['delivery_option'],
            pickup_location=data.get('pickup_location', ''),
            dropoff_location=data.get('dropoff_location', ''),
            delivery_fee=data['delivery_fee'],
            completion_code=data.get('completion_code'),
            timestamp=data['timestamp'],
        )


@dataclass(frozen=True)
class ShopkeeperNotification:
    action: str
    user: str
    product_id: int
    timestamp: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            action=data['action'],
            user=data['user'],
            product_id=data['product_id'],
            timestamp=data['timestamp'],
        )


@dataclass(frozen=True)
class FeeEstimate:
    """A client-side preview. Never send this as a charged amount."""
    shop_id: int
    distance_km: float
    amount: int
    rate_per_km: int
    authoritative: bool = False


@dataclass(frozen=True)
class ExternalBlob:
    """Content-addressed photo reference with direct and byte access."""
    ref: str
    base_url: str
    fetcher: Optional[Callable[[str], bytes]] = field(
        default=None, compare=False, repr=False)

    @property
    def direct_url(self):
        return f"{self.base_url.rstrip('/')}/api/blobs/{self.ref}"

    def get_bytes(self):
        if self.fetcher is None:
            raise ValueError('No fetcher bound to this blob')
        return self.fetcher(self.ref)
