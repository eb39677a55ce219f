ERRORS = {
  "E_MAGIC": "File is not an SSF1 container",
  "E_HEADER": "Container header is truncated or its length cannot be located",
  "E_LENGTH_MISMATCH": "Declared compressed length does not match the chunk stream",
  "E_CHECKSUM_MISMATCH": "Header checksum does not match the chunk stream",
  "E_CHUNK_STREAM": "Chunk stream is truncated or a chunk does not decompress",
  "E_NO_BLOCKS": "Decompressed payload holds no SMBH blocks",
}

WARNINGS = {
  "W_UNCOMPRESSED_MISMATCH": "Declared uncompressed length differs from the decompressed payload",
}
