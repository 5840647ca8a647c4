# Conduit - Application Tests
# Copyright (C) 2025 maigre - Hemisphere Project
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

import asyncio

import pytest

from conduit.config import get_default_config
from conduit.engine.client import MAPPING_ACTIVITY
from conduit.main import ConduitApp
from conduit.models import Mapping


def make_app(engine):
    config = get_default_config()
    config["mapping_debounce_ms"] = 20
    config["settings_debounce_ms"] = 20
    return ConduitApp(config, client=engine)


@pytest.mark.asyncio
async def test_connect_loads_everything(engine):
    engine.mappings.append(Mapping(id="a", osc_address="/a").to_dict())
    app = make_app(engine)

    assert await app.connect()

    assert engine.connected
    assert app.mappings.ids() == ["a"]
    assert app.settings.settings is not None
    assert app.devices.output_names() == ["IAC Bus 1", "USB Midi"]
    assert not app.engine.running


@pytest.mark.asyncio
async def test_unreachable_engine_leaves_empty_panels(engine):
    engine.reachable = False
    app = make_app(engine)
    errors = []
    app.notifier.add_listener(lambda level, message: errors.append(message))

    assert not await app.connect()

    assert errors == ["Engine not reachable"]
    assert app.mappings.mappings == []
    assert not app.mappings.loading
    assert app.settings.settings is None
    assert not app.settings.loading


@pytest.mark.asyncio
async def test_activity_reaches_the_log(engine):
    app = make_app(engine)
    await app.connect()

    engine.dispatch(MAPPING_ACTIVITY, {
        "timestamp": "2025-03-01T10:00:00.000Z",
        "input_protocol": "midi",
        "input_display": "NoteOn ch1 C3 vel100",
        "output_protocol": "osc",
        "output_display": "/cue/go 0.787",
        "mapping_id": "a",
    })
    assert len(app.activity) == 1


@pytest.mark.asyncio
async def test_shutdown_sends_pending_edits(engine):
    engine.mappings.append(Mapping(id="a", osc_address="/a").to_dict())
    app = make_app(engine)
    await app.connect()

    app.mappings.edit("a", osc_address="/last-word")
    app.settings.edit(osc_send_port=9999)
    await asyncio.wait_for(app.shutdown(), timeout=1.0)

    assert engine.mappings[0]["osc_address"] == "/last-word"
    assert engine.settings["osc_send_port"] == 9999
    assert not engine.connected
