"""Named patches shipped with the tool."""
from __future__ import annotations

from dataclasses import dataclass

# Restores the "Build Crane" establish task of map 08 (contamination) to a
# fresh, unfinished state with a single route node.
_BUILD_CRANE_VALUE = """
{
  "$type":"RequestEstablishSaveDesc",
  "isFinished":false,
  "issuedRewardCount":0,
  "routeSaveDesc":{
    "nodes":[{"x": 712.76129150390625,"y": 16.101736068725586,"z": -152.00442504882812}],
    "isNew":true,
    "isConnected":false
  },
  "trafficSaveDesc":{
    "regularConvoySaveDesc":{
      "isRunning":false,
      "isPioneer":false,
      "isStucked":false,
      "isMalfunction":false,
      "activeLifeControllerDescs":[],
      "preterminatedLifeControllerDescs":[],
      "timeToSendNext":481.0
    },
    "objectiveConvoySaveDesc":{
      "$type":"ObjectiveConvoySaveDesc",
      "isRunning":false,
      "isPioneer":false,
      "isStucked":false,
      "isMalfunction":false,
      "activeLifeControllerDescs":[],
      "preterminatedLifeControllerDescs":[],
      "timeToSendNext":0.0,
      "isValid":false,
      "lastAiIndex":-1,
      "passedTrucksCount":-1
    },
    "wasObjectiveAttached":true,
    "retrySaveDesc":{
      "borderIndex":2147483647,
      "stateBorderIndex":2147483647,
      "passedPoses":[],
      "passedRotations":[]
    },
    "stuckPos":null,
    "stuckReason":2,
    "stuckWayTrail":[]
  },
  "firstBuildingMalfunction":false,
  "secondBuildingMalfunction":false,
  "isProgressed":false,
  "isClientSave":false
}
"""


@dataclass(frozen=True)
class Preset:
    name: str
    description: str
    selector: str
    property_name: str
    value_json: str


PRESETS: dict[str, Preset] = {
    p.name: p
    for p in [
        Preset(
            name="build-crane",
            description="Reset Establish_Task_Build_Crane in infrastructure.request-system",
            selector="request-system",
            property_name="Establish_Task_Build_Crane",
            value_json=_BUILD_CRANE_VALUE,
        ),
    ]
}


def get_preset(name: str) -> Preset:
    try:
        return PRESETS[name]
    except KeyError:
        raise KeyError(f"Unknown preset '{name}' (known: {', '.join(sorted(PRESETS))})") from None
