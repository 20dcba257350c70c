import asyncio
import json
import random

import pytest

from rugguesser.config import Config
from rugguesser.services.rugs import CatalogueError, CatalogueSupplier, load_catalogue, rug_from_record

RECORD = {
    'id': 'kashan',
    'title': 'Silk Pile Rug',
    'image_url': 'https://collections.example.org/images/kashan.jpg',
    'museum': 'Sample Collection',
    'source_url': 'https://collections.example.org/objects/kashan',
    'raw_location': 'Iran, probably Kashan',
    'location_name': 'Kashan, Iran',
    'lat': 33.985,
    'lng': 51.41,
    'date': '  ',
}


def _write(tmp_path, records):
    path = tmp_path / 'rugs.json'
    path.write_text(json.dumps(records), encoding='utf-8')
    return path


def test_record_becomes_rug():
    rug = rug_from_record(RECORD)
    assert rug.id == 'kashan'
    assert rug.coordinates.lat == 33.985
    assert rug.date is None
    assert rug.to_dict()['coordinates'] == {'lat': 33.985, 'lng': 51.41}


@pytest.mark.parametrize('override', [
    {'specific': False},
    {'lat': None},
    {'lng': 200},
    {'image_url': ''},
    {'location_name': None},
])
def test_unplayable_records_are_skipped(override):
    assert rug_from_record({**RECORD, **override}) is None


def test_bundled_catalogue_loads():
    rugs = load_catalogue(Config.RUG_CATALOGUE_PATH)
    assert rugs
    assert all(rug.location_name for rug in rugs)
    assert 'sample-kilim-anatolia' not in {rug.id for rug in rugs}


def test_supplier_picks_from_catalogue(tmp_path):
    path = _write(tmp_path, [RECORD, {**RECORD, 'id': 'vague', 'specific': False}])
    supplier = CatalogueSupplier(path, rng=random.Random(7))
    rugs = [asyncio.run(supplier()) for _ in range(3)]
    assert {rug.id for rug in rugs} == {'kashan'}


def test_supplier_without_playable_rugs_fails(tmp_path):
    path = _write(tmp_path, [{**RECORD, 'specific': False}])
    with pytest.raises(CatalogueError):
        asyncio.run(CatalogueSupplier(path)())


def test_broken_catalogue_file(tmp_path):
    path = tmp_path / 'rugs.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(CatalogueError):
        load_catalogue(path)
    with pytest.raises(CatalogueError):
        load_catalogue(tmp_path / 'missing.json')


def test_catalogue_must_be_a_list(tmp_path):
    path = _write(tmp_path, {'rugs': [RECORD]})
    with pytest.raises(CatalogueError):
        load_catalogue(path)


def test_location_can_be_left_out():
    data = rug_from_record({**RECORD, 'culture': 'Safavid', 'description': 'Silk'}).to_dict(reveal_location=False)
    for field in ('coordinates', 'location_name', 'raw_location', 'description', 'culture'):
        assert field not in data
    assert data['image_url'] == RECORD['image_url']
