from wamedia.services.media_downloader import MediaDownloader, media_downloader


def get_media_downloader() -> MediaDownloader:
    """Cliente de download compartilhado; sobrescrito nos testes."""
    return media_downloader
