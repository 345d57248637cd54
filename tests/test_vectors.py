"""Reference values, computed with coreutils sha512sum and openssl enc."""

ZERO_SECRET_HEX = "00" * 32

# SHA-512(label || 00*32)[:16]
SETUP_KEY_HEX = "68ef4d47a460283740129dc26d3ea831"
SETUP_IV_DIGEST_HEX = "504a125ef56feef373347c5b18f37ff6"
SETUP_IV_HEX = "504a125ef56feef373347c5b18f37ff7"
VERIFY_KEY_HEX = "8286f2eb61a6b42421f8487dd4c0ab93"
VERIFY_IV_HEX = "ebf529d40c747a74cfe0d134944c3ed4"

# SHA-512("Pair-Setup-AES-IV" || 49*32)[:16] ends in 0xff
WRAP_SECRET_HEX = "49" * 32
WRAP_SETUP_IV_DIGEST_HEX = "72406dca8b69c792ae36cc286b02dcff"
WRAP_SETUP_IV_HEX = "72406dca8b69c792ae36cc286b02dc00"

# AES-128-CTR keystream for the zero secret's verify key/IV
KEYSTREAM_OFFSET_0_HEX = (
    "88623c4d1cd08b0fb9304dc0ac5ce71ca5b34491f262f52ae1c7551100d5aa4b"
    "197e7db2542dd97b5426ad7185e72fc574096366abf43cfad2e8659f0499eabb"
)
KEYSTREAM_OFFSET_64_HEX = (
    "eeb1c35e8173c320cc78dc8cccba5b0147b0e0596dd13143e3895d3f8dd5298f"
    "1fda8ccbea06c567201a0388d2ce6bb62fb0cc7e895da83d3ad95e677b81b5f8"
)

CONTROLLER_SEED_HEX = "0000000000000000000000000000000000000000000000000000000000000001"
ACCESSORY_SEED_HEX = "0000000000000000000000000000000000000000000000000000000000000002"
