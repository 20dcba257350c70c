import os
import sys
import time

import pytest

# Ensure the project root (containing the `rugguesser` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from rugguesser import create_app
from rugguesser.config import TestConfig
from rugguesser.services.geo import Coordinate
from rugguesser.services.rugs import RugObject

MAMLUK_RUG = RugObject(
    id='mamluk-cairo',
    title='Mamluk Carpet',
    image_url='https://collections.example.org/images/mamluk-cairo.jpg',
    museum='Sample Collection',
    source_url='https://collections.example.org/objects/mamluk-cairo',
    raw_location='Egypt, Cairo',
    location_name='Cairo, Egypt',
    coordinates=Coordinate(30.0444, 31.2357),
    culture='Mamluk',
    date='ca. 1500',
    description='Kaleidoscopic design in red, green and blue wool.',
)


async def mamluk_supplier():
    return MAMLUK_RUG


class ApiTestConfig(TestConfig):
    SECRET_KEY = 'test-secret'
    PLAY_ROUNDS = 3
    ROUND_RETRY_DELAY_SECONDS = 0.01
    ROUND_RETRY_MAX_ATTEMPTS = 0
    GAME_MAX_SESSIONS = 20
    ROUND_SUPPLIER = mamluk_supplier


@pytest.fixture()
def flask_app():
    application = create_app(ApiTestConfig)
    yield application
    application.extensions['game_runtime'].stop()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def wait_for_phase(client, phase, timeout=3.0):
    '''Poll the state endpoint until the game reaches *phase* or time runs out.'''
    deadline = time.monotonic() + timeout
    while True:
        state = client.get('/api/game/state').get_json()
        if state['phase'] == phase or time.monotonic() > deadline:
            return state
        time.sleep(0.01)
