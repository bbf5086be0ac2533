from ccipgw.hashing import keccak256, namehash, sha256


def test_sha256_of_empty_input():
    assert sha256(b"").hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_sha256_accepts_text():
    assert sha256("abc") == sha256(b"abc")


def test_keccak256_of_empty_input():
    assert keccak256(b"").hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


def test_keccak256_digest_length():
    assert len(keccak256(b"some data")) == 32


def test_namehash_of_empty_name_is_zero():
    assert namehash("") == bytes(32)


def test_namehash_of_eth():
    assert namehash("eth").hex() == "93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae"


def test_namehash_is_recursive_over_labels():
    assert namehash("foo.eth") == keccak256(namehash("eth") + keccak256(b"foo"))


def test_namehash_differs_between_names():
    assert namehash("a.eth") != namehash("b.eth")
    assert len(namehash("a.eth")) == 32