"""Tests for the file-based credential store."""
import json
from unittest.mock import patch

import pytest

from wabot.core.exceptions import FilesystemError
from wabot.core.session import CredentialStore, FileCredentialStore


class TestFileCredentialStore:
    """Test suite for FileCredentialStore."""
    
    @pytest.fixture
    def store(self, tmp_path):
        return FileCredentialStore(tmp_path / "session")
    
    def test_implements_protocol(self, store):
        """Test the store satisfies CredentialStore."""
        assert isinstance(store, CredentialStore)
    
    def test_creds_path(self, store, tmp_path):
        """Test the fixed credential path."""
        assert store.creds_path == tmp_path / "session" / "creds.json"
    
    def test_exists_false_initially(self, store):
        """Test a fresh directory has no credentials."""
        assert store.exists() is False
    
    def test_ensure_dir_creates_parents(self, tmp_path):
        """Test nested session directories are created."""
        store = FileCredentialStore(tmp_path / "a" / "b" / "session")
        
        store.ensure_dir()
        
        assert store.session_dir.is_dir()
    
    @pytest.mark.asyncio
    async def test_write_bytes_persists_verbatim(self, store):
        """Test bytes are written exactly."""
        data = b'{"me": {"id": "1@s.whatsapp.net"}}\x00\xff'
        
        await store.write_bytes(data)
        
        assert store.exists()
        assert store.creds_path.read_bytes() == data
    
    @pytest.mark.asyncio
    async def test_write_bytes_overwrites(self, store):
        """Test an existing file is replaced."""
        await store.write_bytes(b"old content that is longer")
        await store.write_bytes(b"new")
        
        assert await store.read_bytes() == b"new"
    
    @pytest.mark.asyncio
    async def test_read_missing_returns_none(self, store):
        """Test reading without a file gives None."""
        assert await store.read_bytes() is None
    
    @pytest.mark.asyncio
    async def test_save_creds_writes_json(self, store):
        """Test creds.update payloads are stored as JSON."""
        await store.save_creds({'registered': True, 'me': {'id': '1@s.whatsapp.net'}})
        
        saved = json.loads(store.creds_path.read_text())
        assert saved['registered'] is True
        assert saved['me']['id'] == '1@s.whatsapp.net'
    
    @pytest.mark.asyncio
    async def test_write_failure_is_filesystem_error(self, store):
        """Test OSError while writing becomes FilesystemError."""
        with patch('wabot.core.session.file_store.aiofiles.open', side_effect=PermissionError("denied")):
            with pytest.raises(FilesystemError) as exc_info:
                await store.write_bytes(b"data")
        
        assert exc_info.value.path == str(store.creds_path)
        assert not store.exists()
    
    def test_ensure_dir_failure(self, tmp_path):
        """Test a file in place of the directory raises FilesystemError."""
        blocker = tmp_path / "session"
        blocker.write_text("not a directory")
        
        with pytest.raises(FilesystemError):
            FileCredentialStore(blocker / "inner").ensure_dir()
    
    @pytest.mark.asyncio
    async def test_delete_removes_directory(self, store):
        """Test delete removes the whole session directory."""
        await store.write_bytes(b"x")
        (store.session_dir / "pre-key-1.json").write_text("{}")
        
        store.delete()
        
        assert not store.session_dir.exists()
    
    def test_delete_missing_is_noop(self, store):
        """Test deleting an absent session does nothing."""
        store.delete()
        
        assert not store.session_dir.exists()
    
    @pytest.mark.asyncio
    async def test_partial_update_keeps_existing_keys(self, store):
        """Test an update with only changed keys merges into the file."""
        await store.write_bytes(json.dumps({
            'noiseKey': {'private': 'abc', 'public': 'def'},
            'signedIdentityKey': {'private': 'ghi'},
            'registered': False,
        }).encode())
        
        await store.save_creds({'registered': True})
        
        saved = json.loads(store.creds_path.read_text())
        assert saved['registered'] is True
        assert saved['noiseKey'] == {'private': 'abc', 'public': 'def'}
        assert saved['signedIdentityKey'] == {'private': 'ghi'}
    
    @pytest.mark.asyncio
    async def test_corrupt_file_is_replaced(self, store):
        """Test an unreadable creds.json is replaced by the update."""
        await store.write_bytes(b"not json")
        
        await store.save_creds({'registered': True})
        
        assert json.loads(store.creds_path.read_text()) == {'registered': True}
    
    @pytest.mark.asyncio
    async def test_remove_creds_keeps_directory(self, store):
        """Test remove_creds deletes only the credential file."""
        await store.write_bytes(b"{}")
        
        store.remove_creds()
        store.remove_creds()
        
        assert not store.exists()
        assert store.session_dir.is_dir()
    
    @pytest.mark.asyncio
    async def test_remove_creds_failure(self, store):
        """Test OSError while unlinking becomes FilesystemError."""
        await store.write_bytes(b"{}")
        
        with patch.object(type(store.creds_path), 'unlink', side_effect=PermissionError("denied")):
            with pytest.raises(FilesystemError) as exc_info:
                store.remove_creds()
        
        assert exc_info.value.path == str(store.creds_path)
