from hue_groups.groups import LightIndexes, resolve_room_lights, resolve_zone_lights
from hue_groups.lookup import dedupe_by_id, device_light_index, index_by_id, refs_of_type
from hue_groups.models import DeviceResource, GroupResource, LightResource, ResourceIdentifier


def _light(rid: str) -> LightResource:
    return LightResource.model_validate({"id": rid, "metadata": {"name": rid}})


def test_device_light_index_keeps_only_light_services():
    devices = [
        DeviceResource.model_validate(
            {
                "id": "d-1",
                "services": [
                    {"rid": "l-1", "rtype": "light"},
                    {"rid": "zb-1", "rtype": "zigbee_connectivity"},
                    {"rid": "l-2", "rtype": "light"},
                ],
            }
        ),
        DeviceResource.model_validate({"id": "d-2", "services": [{"rid": "b-1", "rtype": "button"}]}),
    ]

    assert device_light_index(devices) == {"d-1": ["l-1", "l-2"], "d-2": []}


def test_index_by_id_and_refs_of_type():
    lights = [_light("l-1"), _light("l-2")]
    refs = [ResourceIdentifier(rid="l-1", rtype="light"), ResourceIdentifier(rid="l-1", rtype="device")]

    assert list(index_by_id(lights)) == ["l-1", "l-2"]
    assert refs_of_type(refs, "device") == [ResourceIdentifier(rid="l-1", rtype="device")]


def test_dedupe_by_id_keeps_first_occurrence():
    a, b = _light("l-1"), _light("l-2")
    assert dedupe_by_id([a, b, _light("l-1")]) == [a, b]
    assert dedupe_by_id([a, b, _light("l-1")])[0] is a


def test_resolvers_consult_rtype_not_id():
    # Same id in two namespaces: a zone only follows light refs, a room only device refs.
    indexes = LightIndexes(lights_by_id={"x": _light("x")}, device_light_ids={"x": ["x"]})
    zone = GroupResource.model_validate(
        {"id": "z", "type": "zone", "metadata": {"name": "z"}, "children": [{"rid": "x", "rtype": "device"}]}
    )
    room = GroupResource.model_validate(
        {"id": "r", "type": "room", "metadata": {"name": "r"}, "children": [{"rid": "x", "rtype": "light"}]}
    )

    assert resolve_zone_lights(zone, indexes) == []
    assert resolve_room_lights(room, indexes) == []
