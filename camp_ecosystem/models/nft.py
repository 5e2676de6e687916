"""NFT data models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class NftAsset(BaseModel):
    """A compressed NFT as shown in the dashboard."""

    mint_address: str = Field(..., description="Asset id (used as mint address for compressed NFTs)")
    name: str = Field(..., description="Asset name")
    symbol: str = Field("cNFT", description="Asset symbol")
    uri: str = Field("", description="Off-chain metadata URI")
    image: str = Field("", description="Image URL")
    description: str = Field("", description="Asset description")
    collection: str = Field("Compressed Collection", description="Collection the asset is grouped under")
    attributes: List[Dict[str, Any]] = Field(default_factory=list, description="Metadata attributes")
    compressed: bool = Field(True, description="Whether the asset is compressed")
    tree_id: str = Field("", description="Merkle tree holding the asset")
    leaf_index: int = Field(0, description="Leaf index in the tree")

    @classmethod
    def from_das(cls, asset: Dict[str, Any]) -> Optional["NftAsset"]:
        """Build a model from a DAS ``getAssetsByOwner`` item.

        Returns:
            The asset, or None when it is not a compressed NFT
        """
        compression = asset.get("compression") or {}
        if compression.get("compressed") is not True:
            return None

        content = asset.get("content") or {}
        metadata = content.get("metadata") or {}
        files = content.get("files") or []

        image = ""
        if files and files[0].get("uri"):
            image = files[0]["uri"]
        elif metadata.get("image"):
            image = metadata["image"]
        elif (content.get("links") or {}).get("image"):
            image = content["links"]["image"]

        leaf_index = compression.get("leaf_id") or 0
        name = metadata.get("name") or f"cNFT #{leaf_index or 'Unknown'}"

        collection = next(
            (group.get("group_value") for group in asset.get("grouping") or []
             if group.get("group_key") == "collection"),
            None
        )

        return cls(
            mint_address=asset.get("id", ""),
            name=name,
            symbol=metadata.get("symbol") or "cNFT",
            uri=content.get("json_uri") or "",
            image=image,
            description=metadata.get("description") or "",
            collection=collection or "Compressed Collection",
            attributes=metadata.get("attributes") or [],
            compressed=True,
            tree_id=compression.get("tree") or "",
            leaf_index=leaf_index,
        )
