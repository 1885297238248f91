"""Shared fixtures: an in-memory store and clients that talk to it."""
import io
import json as jsonlib

import pytest

from bargen import create_app
from bargen.client import BargenClient, SessionContext
from bargen.client.transport import auth_headers
from bargen.config import TestConfig
from bargen.extensions import db


class FlaskTestResponse:
    """The slice of ``requests.Response`` the client layer reads."""

    def __init__(self, response):
        self.status_code = response.status_code
        self.content = response.data

    def json(self):
        return jsonlib.loads(self.content)


class FlaskTestTransport:
    def __init__(self, app):
        self.client = app.test_client()

    def request(self, method, path, json=None, files=None, params=None,
                principal=None):
        kwargs = {'headers': auth_headers(principal)}
        if params:
            kwargs['query_string'] = params
        if files:
            kwargs['data'] = {
                name: (io.BytesIO(content), filename, content_type)
                for name, (filename, content, content_type) in files.items()
            }
            kwargs['content_type'] = 'multipart/form-data'
        elif json is not None:
            kwargs['json'] = json
        return FlaskTestResponse(
            self.client.open(path, method=method, **kwargs))


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config['BLOB_FOLDER'] = str(tmp_path / 'blobs')
    # No context stays pushed while the test runs: test-client requests
    # reuse an active app context, and with it the previous caller's login.
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def transport(app):
    return FlaskTestTransport(app)


@pytest.fixture
def client_for(transport):
    def make(principal):
        return BargenClient(
            transport, SessionContext(principal), 'http://localhost')
    return make


@pytest.fixture
def shopkeeper(client_for):
    return client_for('shopkeeper-principal')


@pytest.fixture
def customer(client_for):
    return client_for('customer-principal')


@pytest.fixture
def other_customer(client_for):
    return client_for('other-customer-principal')


@pytest.fixture
def admin(client_for):
    return client_for('admin-principal')


def create_shop(client, name='Corner Store', distance_km=2.5, rating=4):
    return client.create_shop_profile(
        name=name,
        rating=rating,
        address='12 Market Road',
        distance_km=distance_km,
        price_info='Fair prices',
        phone='+91 98765-43210',
        location_url='https://maps.example.com/corner',
    )


def create_product(client, shop_id, name='Red Shoes', price=500,
                   condition='new', **kwargs):
    return client.create_product(
        shop_id,
        name=name,
        description=f'{name} in good shape',
        price=price,
        condition=condition,
        return_policy='7 days',
        **kwargs,
    )


@pytest.fixture
def shop_id(shopkeeper):
    return create_shop(shopkeeper)


@pytest.fixture
def product_id(shopkeeper, shop_id):
    return create_product(shopkeeper, shop_id)
