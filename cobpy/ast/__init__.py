"""COB syntax tree nodes."""

from cobpy.ast.defs import CobConstantDef, CobConstantValue
from cobpy.ast.file import COB_EXTENSIONS, CobFile
from cobpy.ast.generics import (
    CobGenericItem,
    CobGenerics,
    CobGenericMacroParam,
    CobGenericStruct,
    CobGenericTuple,
    CobRustPrimitive,
)
from cobpy.ast.loadable import CobLoadable, CobLoadableIdentifier, CobLoadableVariant
from cobpy.ast.scalars import (
    CobBool,
    CobBuiltin,
    CobHexColor,
    CobNone,
    CobNumber,
    CobNumberValue,
    CobString,
    CobVal,
    Color,
    Val,
    ValUnit,
)
from cobpy.ast.scene import (
    CobSceneLayer,
    CobSceneLayerEntry,
    CobSceneMacroCall,
    CobSceneMacroCallContainer,
    CobSceneMacroCommand,
    CobSceneMacroDef,
    CobSceneMacroValue,
    CobSceneNodeName,
    SceneMacroCommandType,
    SceneMacroDelimiter,
)
from cobpy.ast.value import (
    CobArray,
    CobConstant,
    CobDataMacroCall,
    CobEnum,
    CobMacroParam,
    CobMap,
    CobMapEntry,
    CobMapFieldName,
    CobMapKey,
    CobMapKeyValue,
    CobPayload,
    CobTuple,
    CobValue,
    CobValueGroup,
    CobValueGroupEntry,
    MacroParamKind,
    is_value,
    parse_value,
)

__all__ = [
    "COB_EXTENSIONS",
    "CobArray",
    "CobBool",
    "CobBuiltin",
    "CobConstant",
    "CobConstantDef",
    "CobConstantValue",
    "CobDataMacroCall",
    "CobEnum",
    "CobFile",
    "CobGenericItem",
    "CobGenericMacroParam",
    "CobGenericStruct",
    "CobGenericTuple",
    "CobGenerics",
    "CobHexColor",
    "CobLoadable",
    "CobLoadableIdentifier",
    "CobLoadableVariant",
    "CobMacroParam",
    "CobMap",
    "CobMapEntry",
    "CobMapFieldName",
    "CobMapKey",
    "CobMapKeyValue",
    "CobNone",
    "CobNumber",
    "CobNumberValue",
    "CobPayload",
    "CobRustPrimitive",
    "CobSceneLayer",
    "CobSceneLayerEntry",
    "CobSceneMacroCall",
    "CobSceneMacroCallContainer",
    "CobSceneMacroCommand",
    "CobSceneMacroDef",
    "CobSceneMacroValue",
    "CobSceneNodeName",
    "CobString",
    "CobTuple",
    "CobVal",
    "CobValue",
    "CobValueGroup",
    "CobValueGroupEntry",
    "Color",
    "MacroParamKind",
    "SceneMacroCommandType",
    "SceneMacroDelimiter",
    "Val",
    "ValUnit",
    "is_value",
    "parse_value",
]
