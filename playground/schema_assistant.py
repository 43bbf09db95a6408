"""Schema drafting from a natural-language description."""

import logging

from .config import config
from .errors import SchemaCompileError
from .gateway_client import low_latency_options
from .schema import compile_schema
from .structured import generate_object

logger = logging.getLogger(__name__)

DRAFT_OUTPUT_SCHEMA = compile_schema(
    'z.object({ schema: z.string().describe('
    '"A valid Zod schema string that can be used with z.object()") })'
)

DRAFT_SYSTEM = """You are a schema generator. Given a description of data structure, generate a valid Zod schema string.

Rules:
- Output ONLY the schema code, starting with z.object({...})
- Use only these types: z.string(), z.number(), z.boolean(), z.array(), z.object(), z.enum([])
- Use only these modifiers: .optional(), .nullable(), .default(value), .describe("...")
- Add .describe() to fields to help the AI understand what data to extract
- Keep schemas reasonably simple and focused
- Use snake_case or camelCase consistently for field names

Example output for "product with name and price":
z.object({
  name: z.string().describe("Product name"),
  price: z.number().describe("Product price in USD"),
  currency: z.string().default("USD"),
})"""


async def draft_schema(client, prompt: str) -> str:
    """One structured call returning schema text; no retry."""
    model = config.schema_model
    result = await generate_object(
        client,
        model=model,
        system=DRAFT_SYSTEM,
        prompt=f"Generate a Zod schema for: {prompt}",
        schema=DRAFT_OUTPUT_SCHEMA,
        provider_options=low_latency_options(),
    )
    schema_text = result["schema"]

    try:
        compile_schema(schema_text)
    except SchemaCompileError as e:
        # Still returned: the caller can edit it, object modes degrade anyway
        logger.warning(f"Drafted schema does not compile: {e}")

    return schema_text
