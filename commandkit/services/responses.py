"""
Interaction responses for CommandKit
"""

import logging

import discord

logger = logging.getLogger('commandkit.services.responses')


async def send_ephemeral(interaction: discord.Interaction, content: str) -> None:
    """
    Send a message only the invoking user can see.

    Uses a followup when the interaction has already been answered. Delivery
    failures are logged rather than raised, the rejection itself has already
    happened.

    Args:
        interaction: Interaction to answer
        content: Message text
    """
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as e:
        logger.error(f"Failed to send ephemeral response: {e}")
