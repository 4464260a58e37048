from typing import Optional

from fastapi import FastAPI, UploadFile, File, HTTPException
from .models import ConvertResponse, EncodePolicy, HealthResponse
from .convert import convert_adif_bytes
from .errors import TransAdifError
from .rules import ADIF_SUFFIXES, DEFAULT_OUTPUT_ENCODING, DEFAULT_REPLACEMENT

app = FastAPI(
    title="transadif",
    description="Encoding-correct ADIF conversion with mojibake and field length repair",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/convert", response_model=ConvertResponse)
async def convert(
    file: UploadFile = File(...),
    encoding: str = DEFAULT_OUTPUT_ENCODING,
    input_encoding: Optional[str] = None,
    replace: str = DEFAULT_REPLACEMENT,
    delete: bool = False,
    transliterate: bool = False,
    strict: bool = False,
):
    if not file.filename or not file.filename.lower().endswith(ADIF_SUFFIXES):
        raise HTTPException(status_code=422, detail="Only ADIF (.adi, .adif) files are supported")
    if len(replace) > 1:
        raise HTTPException(status_code=422, detail="replace must be a single character or empty")

    raw = await file.read()
    policy = EncodePolicy(replacement=replace, delete=delete, transliterate=transliterate, strict=strict)
    try:
        return convert_adif_bytes(raw, input_encoding=input_encoding, output_encoding=encoding, policy=policy)
    except TransAdifError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
