import sys
from pathlib import Path

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <save file>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < 128:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    # Flip the last byte of the chunk stream.
    # Header and lengths stay intact, so only the md5 field can catch it.
    idx = len(b) - 1
    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
