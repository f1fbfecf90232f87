"""Function declarations offered to the Live API model"""

from typing import Any, Dict, List

from google.genai import types

from pli_assistant.models.tool_call import ToolName


def policy_function_declarations() -> List[types.FunctionDeclaration]:
    """The three policy form setters, in the order the model should use them"""
    return [
        types.FunctionDeclaration(
            name=ToolName.SET_DATE_OF_BIRTH.value,
            description="Update user Date of Birth. Age must be 19-55. Format: YYYY-MM-DD.",
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "date": types.Schema(
                        type=types.Type.STRING, description="YYYY-MM-DD birth date"
                    )
                },
                required=["date"],
            ),
        ),
        types.FunctionDeclaration(
            name=ToolName.SET_SUM_ASSURED.value,
            description="Update the Sum Assured. Should be multiple of 5000.",
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "amount": types.Schema(type=types.Type.NUMBER, description="Rupee amount")
                },
                required=["amount"],
            ),
        ),
        types.FunctionDeclaration(
            name=ToolName.SET_MATURITY_AGE.value,
            description=(
                "Update Maturity Age choice. Choice must be at least 5 years after current age."
            ),
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "age": types.Schema(
                        type=types.Type.NUMBER, description="35, 40, 45, 50, 55, 58, 60"
                    )
                },
                required=["age"],
            ),
        ),
    ]


def build_policy_tools() -> List[Dict[str, Any]]:
    """Tool list in the camelCase JSON form used by the Live API setup message"""
    tool = types.Tool(function_declarations=policy_function_declarations())
    return [tool.model_dump(mode="json", by_alias=True, exclude_none=True)]
