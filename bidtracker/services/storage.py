# bidtracker/services/storage.py
# Job attachment storage: Azure Blob Storage with a local folder fallback

import os
import logging
import mimetypes
from typing import Optional, Tuple
from uuid import uuid4
from datetime import datetime
from azure.storage.blob import BlobServiceClient, ContentSettings
from azure.core.exceptions import ResourceNotFoundError, AzureError
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = '/uploads/'


class AttachmentStorage:
    """Stores files attached to jobs"""

    def __init__(self, connection_string=None, container_name='attachments', upload_folder='uploads'):
        self.container_name = container_name
        self.upload_folder = upload_folder

        if not connection_string:
            logger.warning("Azure Storage connection string not configured - using local storage fallback")
            self.blob_service_client = None
            self.container_client = None
            self.use_azure = False
        else:
            try:
                self.blob_service_client = BlobServiceClient.from_connection_string(connection_string)
                self.container_client = self.blob_service_client.get_container_client(self.container_name)
                self.use_azure = True
                self._ensure_container_exists()
                logger.info(f"Azure Blob Storage initialized - Container: {self.container_name}")
            except Exception as e:
                logger.error(f"Failed to initialize Azure Storage: {e}")
                self.blob_service_client = None
                self.container_client = None
                self.use_azure = False

    @classmethod
    def from_config(cls, config, instance_path=None):
        upload_folder = config.get('UPLOAD_FOLDER', 'uploads')
        if instance_path and not os.path.isabs(upload_folder):
            upload_folder = os.path.join(instance_path, upload_folder)
        return cls(
            connection_string=config.get('AZURE_STORAGE_CONNECTION_STRING'),
            container_name=config.get('AZURE_STORAGE_CONTAINER_NAME', 'attachments'),
            upload_folder=upload_folder,
        )

    def _ensure_container_exists(self):
        try:
            self.container_client.get_container_properties()
        except ResourceNotFoundError:
            self.container_client.create_container()
            logger.info(f"Created container: {self.container_name}")

    @staticmethod
    def _get_blob_name(folder: str, filename: str) -> str:
        """Generate a unique blob name with folder structure"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid4())[:8]
        secure_name = secure_filename(filename) or 'file'

        name_parts = secure_name.rsplit('.', 1)
        if len(name_parts) == 2:
            name, ext = name_parts
            return f"{folder}/{name}_{timestamp}_{unique_id}.{ext}"
        return f"{folder}/{secure_name}_{timestamp}_{unique_id}"

    def upload_file(self, file_content: bytes, filename: str, folder: str = "general") -> Tuple[bool, str, Optional[str]]:
        """
        Upload a file to Azure Blob Storage or the local fallback

        Returns:
            Tuple of (success, message, file_url)
        """
        if not filename:
            return False, "No file selected", None
        try:
            if self.use_azure:
                return self._upload_to_azure(file_content, filename, folder)
            return self._upload_to_local(file_content, filename, folder)
        except Exception as e:
            logger.error(f"File upload failed: {e}")
            return False, f"Upload failed: {str(e)}", None

    def _upload_to_azure(self, file_content, filename, folder):
        blob_name = self._get_blob_name(folder, filename)
        try:
            blob_client = self.blob_service_client.get_blob_client(
                container=self.container_name,
                blob=blob_name
            )
            content_type = mimetypes.guess_type(filename)[0] or 'application/octet-stream'
            blob_client.upload_blob(
                file_content,
                overwrite=True,
                metadata={
                    'original_filename': secure_filename(filename),
                    'upload_timestamp': datetime.utcnow().isoformat(),
                    'folder': folder
                },
                content_settings=ContentSettings(content_type=content_type),
            )
            logger.info(f"Successfully uploaded to Azure: {blob_name}")
            return True, "File uploaded successfully", blob_client.url
        except AzureError as e:
            logger.error(f"Azure upload failed: {e}")
            return False, f"Azure upload failed: {str(e)}", None

    def _upload_to_local(self, file_content, filename, folder):
        blob_name = self._get_blob_name(folder, filename)
        local_path = os.path.join(self.upload_folder, *blob_name.split('/'))
        os.makedirs(os.path.dirname(local_path), exist_ok=True)

        with open(local_path, 'wb') as f:
            f.write(file_content)

        logger.info(f"Successfully uploaded locally: {local_path}")
        return True, "File uploaded successfully (local storage)", f"{LOCAL_URL_PREFIX}{blob_name}"

    def delete_file(self, file_url: str) -> Tuple[bool, str]:
        """Delete a file from storage; a missing file counts as deleted"""
        try:
            if self.use_azure and file_url.startswith('https://'):
                return self._delete_from_azure(file_url)
            return self._delete_from_local(file_url)
        except Exception as e:
            logger.error(f"File deletion failed: {e}")
            return False, f"Deletion failed: {str(e)}"

    def _delete_from_azure(self, blob_url):
        blob_name = blob_url.split(f'{self.container_name}/', 1)[-1]
        try:
            self.blob_service_client.get_blob_client(
                container=self.container_name,
                blob=blob_name
            ).delete_blob()
            logger.info(f"Deleted from Azure: {blob_name}")
            return True, "File deleted successfully"
        except ResourceNotFoundError:
            return True, "File not found (already deleted)"
        except AzureError as e:
            logger.error(f"Azure deletion failed: {e}")
            return False, f"Azure deletion failed: {str(e)}"

    def _delete_from_local(self, file_url):
        if not file_url.startswith(LOCAL_URL_PREFIX):
            return False, "Unrecognized file location"
        relative = file_url[len(LOCAL_URL_PREFIX):]
        local_path = self.local_path(relative)
        if local_path is None:
            return False, "Unrecognized file location"
        if os.path.exists(local_path):
            os.remove(local_path)
            logger.info(f"Deleted local file: {local_path}")
            return True, "File deleted successfully"
        return True, "File not found (already deleted)"

    def local_path(self, relative):
        """Absolute path of an uploaded file, or None if it escapes the upload folder"""
        base = os.path.abspath(self.upload_folder)
        path = os.path.abspath(os.path.join(base, *relative.split('/')))
        if os.path.commonpath([base, path]) != base:
            return None
        return path
